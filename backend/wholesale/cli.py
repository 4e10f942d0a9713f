# Overview: Flask CLI command groups for bootstrap, profile and rate setup, and inventory maintenance.

# backend/wholesale/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init-db
#   Create all tables (idempotent).
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
# - python -m flask system seed-demo
#   Owner + staff profiles, a small catalog, courier rates and opening stock.
#
# Profiles (mirrors of identity-provider actors):
# - python -m flask profiles create --id u_owner --name "Owner" --role owner
# - python -m flask profiles list
# - python -m flask profiles set-rate u_staff 2500
#   Commission rate in basis points; applies to orders created afterwards.
#
# Courier rates:
# - python -m flask rates set luzon 12000
# - python -m flask rates list
#
# Inventory:
# - python -m flask inventory reconcile [--fix]
#   Compare running on-hand with the movement log; --fix rewrites aggregates.

import click
from flask.cli import with_appcontext

from .errors import LedgerError
from .extensions import db
from .models import Product, Profile
from .permissions import Role
from .services import identity_service, inventory_service, rate_service


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create all tables that do not exist yet."""
    db.create_all()
    click.echo("PASS Schema ready.")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()

    click.echo("BUILD  Creating all tables...")
    db.create_all()

    click.echo("PASS Database reset complete. Run 'python -m flask system seed-demo' for sample data.")


DEMO_PRODUCTS = [
    # sku, name, category, unit cost, sell price (cents)
    ("TSHIRT-BLK-M", "T-Shirt Black M", "apparel", 6000, 10000),
    ("TSHIRT-WHT-M", "T-Shirt White M", "apparel", 6000, 10000),
    ("MUG-CLASSIC", "Classic Mug", "homeware", 4500, 8000),
    ("TOTE-CANVAS", "Canvas Tote", "bags", 7000, 12500),
]

DEMO_RATES = {"luzon": 12000, "visayas": 15000, "mindanao": 18000}


@system_group.command('seed-demo')
@with_appcontext
def seed_demo():
    """Idempotent demo data for local development."""
    db.create_all()

    owner = db.session.get(Profile, "u_owner")
    if owner is None:
        owner = identity_service.create_profile(actor_id="u_owner", display_name="Owner", role=Role.OWNER)
        click.echo("PASS Created profile u_owner (owner)")
    if db.session.get(Profile, "u_staff") is None:
        identity_service.create_profile(actor_id="u_staff", display_name="Staff", role=Role.STAFF)
        click.echo("PASS Created profile u_staff (staff)")

    created_skus = []
    for sku, name, category, cost, price in DEMO_PRODUCTS:
        if db.session.query(Product).filter_by(sku=sku).first() is None:
            db.session.add(Product(
                sku=sku, name=name, category=category,
                unit_cost_cents=cost, sell_price_cents=price, is_active=True,
            ))
            created_skus.append(sku)
    db.session.commit()

    for region, cost in DEMO_RATES.items():
        rate_service.set_rate(region, cost)

    actor = identity_service.actor_from_profile(owner)
    for sku in created_skus:
        inventory_service.adjust(sku, 50, actor=actor, reason="opening_stock")

    click.echo(f"PASS Seeded {len(created_skus)} product(s), {len(DEMO_RATES)} courier rate(s).")


# =============================================================================
# PROFILES
# =============================================================================

@click.group('profiles')
def profiles_group():
    """Actor profile commands."""


@profiles_group.command('create')
@click.option('--id', 'actor_id', required=True, help='Identity-provider actor id')
@click.option('--name', required=True, help='Display name')
@click.option('--role', type=click.Choice(Role.ALL), default=Role.STAFF, show_default=True)
@click.option('--email', default=None)
@click.option('--rate-bps', type=int, default=None, help='Commission rate in basis points')
@with_appcontext
def create_profile_cli(actor_id, name, role, email, rate_bps):
    """Create a profile for an upstream actor."""
    try:
        profile = identity_service.create_profile(
            actor_id=actor_id,
            display_name=name,
            role=role,
            email=email,
            commission_rate_bps=rate_bps,
        )
    except LedgerError as e:
        click.echo(f"FAIL {e}")
        return
    click.echo(f"PASS Created profile {profile.id} ({profile.role}, {profile.commission_rate_bps} bps)")


@profiles_group.command('list')
@with_appcontext
def list_profiles_cli():
    """List all profiles."""
    profiles = identity_service.list_profiles()
    if not profiles:
        click.echo("No profiles found.")
        return

    click.echo("\n" + "="*80)
    click.echo(f"{'ID':<20} {'Name':<25} {'Role':<8} {'Rate':<8} {'Active'}")
    click.echo("="*80)
    for p in profiles:
        active_str = "Yes" if p.is_active else "No"
        click.echo(f"{p.id:<20} {p.display_name:<25} {p.role:<8} {p.commission_rate_bps:<8} {active_str}")
    click.echo("="*80 + "\n")


@profiles_group.command('set-rate')
@click.argument('actor_id')
@click.argument('rate_bps', type=int)
@with_appcontext
def set_rate_cli(actor_id, rate_bps):
    """Set an actor's commission rate (basis points; 3000 = 30%)."""
    try:
        profile = identity_service.set_commission_rate(actor_id, rate_bps)
    except LedgerError as e:
        click.echo(f"FAIL {e}")
        return
    click.echo(f"PASS {profile.id} commission rate is now {profile.commission_rate_bps} bps")


# =============================================================================
# COURIER RATES
# =============================================================================

@click.group('rates')
def rates_group():
    """Courier rate table commands."""


@rates_group.command('set')
@click.argument('region')
@click.argument('cost_cents', type=int)
@with_appcontext
def set_courier_rate_cli(region, cost_cents):
    try:
        row = rate_service.set_rate(region, cost_cents)
    except LedgerError as e:
        click.echo(f"FAIL {e}")
        return
    click.echo(f"PASS {row.region}: {row.cost_cents} cents")


@rates_group.command('list')
@with_appcontext
def list_courier_rates_cli():
    rows = rate_service.list_rates()
    if not rows:
        click.echo("No courier rates configured.")
        return
    for row in rows:
        click.echo(f"{row.region:<12} {row.cost_cents}")


# =============================================================================
# INVENTORY
# =============================================================================

@click.group('inventory')
def inventory_group():
    """Inventory maintenance commands."""


@inventory_group.command('reconcile')
@click.option('--fix', is_flag=True, help='Rewrite aggregates from the movement log')
@with_appcontext
def reconcile_cli(fix):
    """Report SKUs whose on-hand aggregate differs from their movement log."""
    mismatches = inventory_service.reconcile(fix=fix)
    if not mismatches:
        click.echo("PASS All inventory levels match their movements.")
        return

    for row in mismatches:
        click.echo(f"DRIFT {row['sku']:<20} level={row['qty_on_hand']:<8} movements={row['movement_sum']}")
    if fix:
        click.echo(f"PASS Rewrote {len(mismatches)} level(s) from the movement log.")
    else:
        click.echo(f"WARN {len(mismatches)} SKU(s) out of sync. Re-run with --fix to repair.")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(profiles_group)
    app.cli.add_command(rates_group)
    app.cli.add_command(inventory_group)
