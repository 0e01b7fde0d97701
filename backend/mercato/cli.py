# Overview: Flask CLI command groups for bootstrap, inspection, and maintenance.

# backend/mercato/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Use: flask --app mercato <group> <command> [options]
#
# System bootstrap:
# - flask --app mercato system init [--developer-password "Admin123"]
#   Idempotent bootstrap: creates tables, the eight roles and the developer user.
# - flask --app mercato system seed-roles
#   Create the fixed roles only.
#
# User bootstrap:
# - flask --app mercato users create --username ops --password "secret1" --role OperationsAdmin
#   Create a user with any role (prompts if options are omitted).
# - flask --app mercato users list
#   List all users with roles and active status.
#
# Permission inspection:
# - flask --app mercato perms list [--role Supplier]
#   List permissions, optionally only those granted to a role.
# - flask --app mercato perms check Supplier APPROVE_ORDER_REQUESTS
#   Check whether a role grants a permission.

import click
from flask import current_app
from flask.cli import with_appcontext

from .extensions import db
from .models import User
from .permissions import (
    PERMISSION_DEFINITIONS,
    ROLE_LABELS,
    SystemRole,
    authorize,
    get_role_permissions,
)
from .services import auth_service
from .validation import DomainError


ROLE_CHOICES = click.Choice(list(ROLE_LABELS.values()), case_sensitive=False)


def _role_from_label(label: str) -> SystemRole:
    for role, name in ROLE_LABELS.items():
        if name.lower() == label.lower():
            return role
    raise click.BadParameter(f"Unknown role: {label}")


@click.group('system')
def system_group():
    """System bootstrap commands."""


@system_group.command('init')
@click.option('--developer-password', default='Admin123', show_default=True,
              help='Password for the bootstrap developer account')
@with_appcontext
def init_system(developer_password):
    """
    Initialize the marketplace: tables, roles and the developer account.

    SECURITY: Change the developer password immediately in production!
    """
    click.echo("START Initializing marketplace...")

    db.create_all()
    click.echo("PASS Tables ready")

    created = auth_service.seed_roles()
    click.echo(f"PASS Roles ready ({len(created)} created)")

    username = current_app.config.get("DEVELOPER_USERNAME", "developer")
    try:
        user, was_created = auth_service.ensure_developer_user(username, developer_password)
    except DomainError as exc:
        raise click.ClickException(str(exc))

    if was_created:
        click.echo(f"PASS Created developer user: {user.username} (ID: {user.id})")
    else:
        click.echo(f"PASS Developer user already exists: {user.username} (ID: {user.id})")

    click.echo("DONE")


@system_group.command('seed-roles')
@with_appcontext
def seed_roles():
    """Create the fixed roles (idempotent)."""
    created = auth_service.seed_roles()
    for role in created:
        click.echo(f"PASS Created role {role.id}: {role.name}")
    if not created:
        click.echo("PASS All roles already exist")


@click.group('users')
def users_group():
    """User inspection and bootstrap commands."""


@users_group.command('list')
@with_appcontext
def list_users():
    users = db.session.query(User).order_by(User.id).all()
    if not users:
        click.echo("No users found")
        return
    for user in users:
        status = "active" if user.is_active else "inactive"
        role = user.role.name if user.role else user.role_id
        click.echo(f"{user.id:>4}  {user.username:<24} {role:<16} {status}")


@users_group.command('create')
@click.option('--username', prompt=True)
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True)
@click.option('--role', 'role_label', type=ROLE_CHOICES, prompt=True)
@click.option('--email', default=None)
@click.option('--phone', default=None)
@with_appcontext
def create_user(username, password, role_label, email, phone):
    """Create a user with the given role."""
    role = _role_from_label(role_label)
    try:
        user = auth_service.create_user(username, password, role, email=email, phone=phone)
    except DomainError as exc:
        raise click.ClickException(str(exc))
    click.echo(f"PASS Created user {user.username} (ID: {user.id}) as {role.label}")


@click.group('perms')
def perms_group():
    """Permission inspection commands."""


@perms_group.command('list')
@click.option('--role', 'role_label', type=ROLE_CHOICES, default=None)
def list_permissions(role_label):
    granted = get_role_permissions(_role_from_label(role_label)) if role_label else None
    for code, name, description, category in PERMISSION_DEFINITIONS:
        if granted is not None and code not in granted:
            continue
        click.echo(f"{category:<14} {code:<28} {description}")


@perms_group.command('check')
@click.argument('role_label', type=ROLE_CHOICES)
@click.argument('permission_code')
def check_permission(role_label, permission_code):
    role = _role_from_label(role_label)
    result = authorize(role, permission_code.upper())
    if result.allowed:
        click.echo(f"PASS {role.label} has {permission_code.upper()}")
    else:
        click.echo(f"FAIL {result.reason}")


def register_commands(app):
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
    app.cli.add_command(perms_group)
