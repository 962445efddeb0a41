"""
Flask CLI commands.

Commands:
- flask init-db: Create all tables
- flask create-user: Create a user with a role
- flask issue-token: Print a bearer token for a user
"""

import click
from app.database import create_tables, get_session
from app.models import Role, User


def init_cli_commands(app):
    """Register CLI commands with Flask app."""

    @app.cli.command('init-db')
    def init_db_command():
        """Create every table that does not exist yet."""
        create_tables()
        click.echo(click.style('✅ Tables created', fg='green'))

    @app.cli.command('create-user')
    @click.option('--name', prompt=True, help='Display name')
    @click.option('--username', prompt=True, help='Login username')
    @click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
    @click.option('--role', 'role_name', prompt=True, default='Admin', help='Role name (created if missing)')
    def create_user(name, username, password, role_name):
        """Create a user; the role is created when it does not exist."""
        if len(password) < 6:
            click.echo(click.style('❌ Password must have at least 6 characters.', fg='red'))
            return

        db_session = get_session()
        if db_session.query(User).filter_by(username=username).first():
            click.echo(click.style(f'❌ Username already taken: {username}', fg='red'))
            return

        try:
            role = db_session.query(Role).filter_by(role_name=role_name).first()
            if not role:
                role = Role(role_name=role_name)
                db_session.add(role)
                db_session.flush()

            user = User(name=name, username=username, role_id=role.id)
            user.set_password(password)
            db_session.add(user)
            db_session.commit()

            click.echo(click.style('\n✅ User created', fg='green', bold=True))
            click.echo(f'   Username: {username}')
            click.echo(f'   Role: {role_name}')
            click.echo(f'   ID: {user.id}')
        except Exception as e:
            db_session.rollback()
            click.echo(click.style(f'❌ Error creating user: {str(e)}', fg='red'))

    @app.cli.command('issue-token')
    @click.argument('username')
    def issue_token_command(username):
        """Print a bearer token for USERNAME."""
        from app.services.auth_service import issue_token

        user = get_session().query(User).filter(
            User.username == username,
            User.deleted_at.is_(None)
        ).first()
        if not user:
            click.echo(click.style(f'❌ Unknown user: {username}', fg='red'))
            return
        click.echo(issue_token(user))
