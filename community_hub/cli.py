from functools import wraps

import click
from flask.cli import with_appcontext
from community_hub.extensions import db
from community_hub.models import User, ROLE_ADMIN, ROLE_MEMBER
from community_hub.services import communities as community_service
from community_hub.services import invitation_codes, memberships, membership_store
from community_hub.services.errors import MembershipError


def _service_errors(fn):
    """Turn typed membership failures into a clean CLI error (exit 1, message on stderr)."""
    @wraps(fn)
    def _wrap(*args, **kwargs):
        try:
            return fn(*args, **kwargs)
        except MembershipError as e:
            raise click.ClickException(e.message) from e
    return _wrap


@click.group()
def users():
    """User records (identity only; auth lives elsewhere)."""

@users.command("create")
@click.option("--email", required=True)
@click.option("--display-name", default=None)
@with_appcontext
def users_create(email, display_name):
    email = email.strip().lower()
    if db.session.query(User).filter_by(email=email).count():
        raise click.ClickException("User already exists")
    user = User(email=email, display_name=display_name, is_active=True)
    db.session.add(user)
    db.session.commit()
    click.echo(f"User created id={user.id} email={user.email}")


@click.group()
def communities():
    """Community bootstrap helpers."""

@communities.command("create")
@click.option("--name", required=True)
@click.option("--organizer-id", type=int, required=True, help="Existing user id")
@click.option("--parent-id", type=int, default=None)
@with_appcontext
@_service_errors
def communities_create(name, organizer_id, parent_id):
    if not db.session.get(User, organizer_id):
        raise click.ClickException(f"User id {organizer_id} not found")
    try:
        community = community_service.create_community(name, organizer_id, parent_id=parent_id)
    except ValueError as e:
        raise click.ClickException(str(e)) from e
    code = memberships.get_invitation_code(organizer_id, community.id)
    click.echo(f"Community created id={community.id} organizer_id={organizer_id} code={code.code}")

@communities.command("children")
@click.option("--parent-id", type=int, required=True)
@with_appcontext
@_service_errors
def communities_children(parent_id):
    for c in community_service.list_child_communities(parent_id):
        click.echo(f"{c.id}\t{c.name}")


@click.group()
def members():
    """Community membership ops."""

@members.command("join")
@click.option("--community-id", type=int, required=True)
@click.option("--user-id", type=int, required=True)
@click.option("--role", type=click.Choice([ROLE_MEMBER, ROLE_ADMIN]), default=ROLE_MEMBER)
@with_appcontext
@_service_errors
def members_join(community_id, user_id, role):
    m = memberships.join_community(user_id, community_id, role)
    click.echo(f"Joined user_id={m.user_id} community_id={m.community_id} role={m.role}")

@members.command("join-code")
@click.option("--user-id", type=int, required=True)
@click.option("--code", required=True)
@with_appcontext
@_service_errors
def members_join_code(user_id, code):
    m = memberships.join_community_with_code(user_id, code)
    click.echo(f"Joined user_id={m.user_id} community_id={m.community_id} role={m.role}")

@members.command("leave")
@click.option("--community-id", type=int, required=True)
@click.option("--user-id", type=int, required=True)
@with_appcontext
@_service_errors
def members_leave(community_id, user_id):
    memberships.leave_community(user_id, community_id)
    click.echo(f"User {user_id} left community {community_id}")

@members.command("list")
@click.option("--community-id", type=int, required=True)
@with_appcontext
@_service_errors
def members_list(community_id):
    for m in memberships.list_memberships(community_id):
        click.echo(f"{m.user_id}\t{m.role}\t{m.joined_at.isoformat() if m.joined_at else ''}")


@click.group()
def codes():
    """Invitation code ops."""

@codes.command("show")
@click.option("--community-id", type=int, required=True)
@click.option("--user-id", type=int, required=True)
@with_appcontext
@_service_errors
def codes_show(community_id, user_id):
    click.echo(memberships.get_invitation_code(user_id, community_id).code)

@codes.command("backfill")
@with_appcontext
@_service_errors
def codes_backfill():
    """Mint codes for memberships that predate code issuance (or lost theirs)."""
    with membership_store.transaction() as session:
        minted = invitation_codes.backfill_missing_codes(session)
    click.echo(f"Backfill complete: minted={minted}")


def register_cli(app):
    app.cli.add_command(users)
    app.cli.add_command(communities)
    app.cli.add_command(members)
    app.cli.add_command(codes)
