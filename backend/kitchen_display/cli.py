"""
Kitchen display CLI.

Terminal dashboard for the live order stream, plus one-shot operator
commands.
"""

import asyncio
from datetime import datetime, timedelta, timezone

import httpx
import typer
from rich.console import Console
from rich.live import Live
from rich.table import Table

from shared.config.logging import setup_logging

from kitchen_display.ack_store import AckStore
from kitchen_display.alarm import AlertStateMachine
from kitchen_display.api_client import LiveOrdersClient
from kitchen_display.dashboard import KitchenDashboard
from kitchen_display.reconciler import KitchenOrder, OrderReconciler, compute_timing
from kitchen_display.settings import DashboardSettings, get_dashboard_settings

app = typer.Typer(
    name="kitchen-display",
    help="Live kitchen order dashboard",
    add_completion=False,
)
console = Console()


STATUS_STYLES = {
    "new": "bold yellow",
    "paid": "bold yellow",
    "preparing": "cyan",
    "prepared": "green",
}


def _format_minutes(delta: timedelta) -> str:
    minutes = int(delta.total_seconds() // 60)
    return f"{minutes}m" if minutes >= 0 else f"-{abs(minutes)}m"


def build_orders_table(
    orders: list[KitchenOrder],
    now: datetime,
    settings: DashboardSettings,
    title: str = "Live Orders",
) -> Table:
    table = Table(title=title)
    table.add_column("#", style="bold")
    table.add_column("Status")
    table.add_column("Items")
    table.add_column("Total", justify="right")
    table.add_column("Elapsed", justify="right")
    table.add_column("ETA", justify="right")
    table.add_column("Ack")

    for entry in orders:
        order = entry.snapshot
        timing = compute_timing(order, now, settings.eta_base_minutes, settings.eta_per_item_minutes)
        items = ", ".join(f"{item.qty}x {item.title}" for item in order.items)
        eta = "DUE" if timing.due else _format_minutes(timing.remaining)
        if timing.estimated:
            eta += "*"
        table.add_row(
            str(order.id),
            f"[{STATUS_STYLES.get(order.status, 'white')}]{order.status}[/]",
            items,
            f"£{order.total:.2f}",
            _format_minutes(timing.elapsed),
            f"[red]{eta}[/red]" if timing.due else eta,
            "✓" if entry.acknowledged else "[bold red]NEW[/bold red]",
        )
    return table


def _build_dashboard(settings: DashboardSettings) -> KitchenDashboard:
    ack_store = AckStore(settings.ack_store_path, timedelta(hours=settings.ack_retention_hours))
    return KitchenDashboard(
        client=LiveOrdersClient.from_settings(settings),
        reconciler=OrderReconciler(ack_store),
        alarm=AlertStateMachine(console.bell, settings.alarm_interval_seconds),
        settings=settings,
    )


# =============================================================================
# Dashboard
# =============================================================================


@app.command()
def watch():
    """Show the live order dashboard and ring while new orders are waiting."""
    setup_logging()
    settings = get_dashboard_settings()

    async def _watch():
        dashboard = _build_dashboard(settings)
        stop = asyncio.Event()
        stream_task = asyncio.create_task(dashboard.run(stop), name="live_orders_stream")
        try:
            with Live(console=console, refresh_per_second=4) as live:
                while True:
                    dashboard.tick()
                    state = "connected" if dashboard.connected else "reconnecting"
                    live.update(
                        build_orders_table(
                            dashboard.reconciler.orders,
                            datetime.now(timezone.utc),
                            settings,
                            title=f"Live Orders ({state}, alert {dashboard.alarm.state.value})",
                        )
                    )
                    await asyncio.sleep(settings.refresh_interval_seconds)
        finally:
            stop.set()
            stream_task.cancel()
            await asyncio.gather(stream_task, return_exceptions=True)
            await dashboard.client.aclose()

    try:
        asyncio.run(_watch())
    except KeyboardInterrupt:
        console.print("[yellow]Stopped[/yellow]")


@app.command()
def orders():
    """Print the current kitchen orders once."""
    settings = get_dashboard_settings()

    async def _orders():
        async with LiveOrdersClient.from_settings(settings) as client:
            return await client.fetch_kitchen_orders()

    try:
        fetched = asyncio.run(_orders())
    except httpx.HTTPError as e:
        console.print(f"[red]✗ Failed to fetch orders: {e}[/red]")
        raise typer.Exit(1)

    ack_store = AckStore(settings.ack_store_path, timedelta(hours=settings.ack_retention_hours))
    reconciler = OrderReconciler(ack_store)
    reconciler.load(fetched)
    console.print(build_orders_table(reconciler.orders, datetime.now(timezone.utc), settings))


# =============================================================================
# Operator Commands
# =============================================================================

ACTIONS = {
    "accept": KitchenDashboard.accept,
    "prepared": KitchenDashboard.mark_prepared,
    "complete": KitchenDashboard.complete,
    "reject": KitchenDashboard.reject,
}


def _run_action(order_id: int, action: str) -> None:
    settings = get_dashboard_settings()

    async def _act():
        dashboard = _build_dashboard(settings)
        try:
            await dashboard.resync()
            return await ACTIONS[action](dashboard, order_id)
        finally:
            await dashboard.client.aclose()

    if asyncio.run(_act()):
        console.print(f"[green]✓ Order {order_id}: {action}[/green]")
    else:
        console.print(f"[red]✗ Order {order_id}: {action} failed[/red]")
        raise typer.Exit(1)


@app.command()
def accept(order_id: int = typer.Argument(..., help="Order ID")):
    """Accept an order (start preparing)."""
    _run_action(order_id, "accept")


@app.command()
def prepared(order_id: int = typer.Argument(..., help="Order ID")):
    """Mark an order as prepared."""
    _run_action(order_id, "prepared")


@app.command()
def complete(order_id: int = typer.Argument(..., help="Order ID")):
    """Mark an order as completed (collected or delivered)."""
    _run_action(order_id, "complete")


@app.command()
def reject(order_id: int = typer.Argument(..., help="Order ID")):
    """Reject (cancel) an order."""
    _run_action(order_id, "reject")


@app.command()
def eta(
    order_id: int = typer.Argument(..., help="Order ID"),
    delta_minutes: int = typer.Argument(..., help="Minutes to add (negative to bring forward)"),
):
    """Move an order's estimated ready time."""
    settings = get_dashboard_settings()

    async def _eta():
        dashboard = _build_dashboard(settings)
        try:
            await dashboard.resync()
            return await dashboard.adjust_eta(order_id, delta_minutes)
        finally:
            await dashboard.client.aclose()

    if asyncio.run(_eta()):
        console.print(f"[green]✓ Order {order_id}: ETA moved {delta_minutes:+d} min[/green]")
    else:
        console.print(f"[red]✗ Order {order_id}: ETA adjust failed[/red]")
        raise typer.Exit(1)


# =============================================================================
# Health Commands
# =============================================================================


@app.command()
def health():
    """Check API health and open live order streams."""
    settings = get_dashboard_settings()

    async def _health():
        async with LiveOrdersClient.from_settings(settings) as client:
            return await client.health()

    table = Table(title="Service Health")
    table.add_column("Service", style="cyan")
    table.add_column("Status", style="green")
    table.add_column("Live subscribers", style="yellow")

    try:
        data = asyncio.run(_health())
        table.add_row("REST API", "✓ Healthy", str(data.get("live_order_subscribers", "-")))
    except httpx.HTTPError as e:
        table.add_row("REST API", f"✗ {type(e).__name__}", "-")

    console.print(table)


if __name__ == "__main__":
    app()
