"""
Kitchen display client.

Keeps a local, reconciled list of kitchen-relevant orders from one full
fetch plus the live order event stream, derives countdowns, and sounds an
alert while new orders are waiting for acknowledgment.

- settings.py: DashboardSettings (KITCHEN_DISPLAY_* environment variables)
- ack_store.py: Durable acknowledged-order ids with a retention window
- alarm.py: silent/alarming alert state machine
- reconciler.py: Event application and derived timing
- api_client.py: httpx client for the REST API and the event stream
- dashboard.py: Wires the above together; operator actions
- cli.py: Terminal dashboard (typer + rich)
"""
