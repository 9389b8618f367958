"""
CLI Commands for OneReserve Comercial

Usage:
    flask init-db                    # Create tables and default users
    flask seed-users                 # Create default admin/comercial users if missing
    flask create-user --username X   # Create a user (password generated if not provided)
    flask seed-demo                  # Load demo clients and visits
    flask check-security             # Review configuration before deploying
"""

import re
import secrets
import string

import click
from flask.cli import with_appcontext

# Usuarios con los que arranca la aplicación
DEFAULT_USERS = [
    {'username': 'admin', 'name': 'Directivo', 'role': 'admin', 'password': 'adminpassword'},
    {'username': 'comercial', 'name': 'Comercial', 'role': 'commercial', 'password': 'password'},
]


def register_commands(app):
    """Register CLI commands with Flask app."""

    @app.cli.command('init-db')
    @with_appcontext
    def init_db():
        """Create all tables and the default users."""
        from extensions import db

        db.create_all()
        created = seed_default_users()
        click.echo('✓ Base de datos inicializada')
        for username in created:
            click.echo(f"  + usuario '{username}' creado")

    @app.cli.command('seed-users')
    @with_appcontext
    def seed_users():
        """Create the default users that do not exist yet."""
        created = seed_default_users()
        if not created:
            click.echo('Default users already exist.')
            return
        for username in created:
            click.echo(f"✓ User '{username}' created")

    @app.cli.command('create-user')
    @click.option('--username', required=True, help='Login name')
    @click.option('--name', default=None, help='Display name (defaults to username)')
    @click.option('--role', type=click.Choice(['admin', 'commercial']), default='commercial')
    @click.option('--password', default=None, help='Password (generated if not provided)')
    @with_appcontext
    def create_user(username, name, role, password):
        """Create a user for the application."""
        from extensions import db
        from models import User

        if User.query.filter_by(username=username).first():
            click.echo(f"Error: User '{username}' already exists.")
            return

        # Generate secure password if not provided
        if not password:
            password = generate_secure_password()
            click.echo(f"\nGenerated secure password: {password}")
            click.echo("⚠️  Save this password now! It won't be shown again.\n")
        else:
            is_valid, message = validate_password_strength(password)
            if not is_valid:
                click.echo(f"Error: Password too weak - {message}")
                return

        user = User(username=username, name=name or username, role=role)
        user.set_password(password)
        db.session.add(user)
        db.session.commit()

        click.echo(f"✓ User '{username}' ({role}) created successfully!")

    @app.cli.command('seed-demo')
    @with_appcontext
    def seed_demo():
        """Load demo clients and visits."""
        from seed_data import seed_database

        clients, visits = seed_database()
        click.echo(f'✓ Datos de demostración cargados: {clients} clientes, {visits} visitas')

    @app.cli.command('check-security')
    @with_appcontext
    def check_security():
        """Check application security configuration."""
        from models import User

        issues = []
        warnings = []

        # Check SECRET_KEY
        secret_key = app.config.get('SECRET_KEY') or ''
        if 'dev' in secret_key.lower() or 'change' in secret_key.lower():
            issues.append("SECRET_KEY appears to be a development/default value")

        if app.config.get('JWT_SECRET_KEY') == secret_key:
            warnings.append("JWT_SECRET_KEY not set - tokens are signed with SECRET_KEY")

        # Default users still using their seeded password
        for default in DEFAULT_USERS:
            user = User.query.filter_by(username=default['username']).first()
            if user and user.check_password(default['password']):
                issues.append(f"User '{default['username']}' still has its default password")

        if not app.config.get('GEMINI_API_KEY'):
            warnings.append("GEMINI_API_KEY not set - place search and sentiment are disabled")

        # Check debug mode
        if app.config.get('DEBUG', False):
            warnings.append("DEBUG mode is enabled - disable in production")

        # Print results
        click.echo("\n🔒 Security Check Results\n")

        if issues:
            click.echo("❌ CRITICAL ISSUES:")
            for issue in issues:
                click.echo(f"   • {issue}")
            click.echo()

        if warnings:
            click.echo("⚠️  WARNINGS:")
            for warning in warnings:
                click.echo(f"   • {warning}")
            click.echo()

        if not issues and not warnings:
            click.echo("✓ No security issues detected!")
        elif not issues:
            click.echo("✓ No critical issues, but review warnings above.")
        else:
            click.echo("⚠️  Please address critical issues before deploying to production!")


def seed_default_users():
    """
    Create the default users that are missing.

    Returns:
        list of usernames created
    """
    from extensions import db
    from models import User

    created = []
    for default in DEFAULT_USERS:
        if User.query.filter_by(username=default['username']).first():
            continue
        user = User(username=default['username'], name=default['name'], role=default['role'])
        user.set_password(default['password'])
        db.session.add(user)
        created.append(default['username'])

    if created:
        db.session.commit()
    return created


def generate_secure_password(length: int = 16) -> str:
    """Generate a cryptographically secure random password."""
    alphabet = string.ascii_letters + string.digits + "!@#$%^&*"
    password = [
        secrets.choice(string.ascii_uppercase),
        secrets.choice(string.ascii_lowercase),
        secrets.choice(string.digits),
        secrets.choice("!@#$%^&*")
    ]
    password += [secrets.choice(alphabet) for _ in range(length - 4)]
    secrets.SystemRandom().shuffle(password)
    return ''.join(password)


def validate_password_strength(password: str) -> tuple[bool, str | None]:
    """
    Validate password meets security requirements.

    Returns:
        tuple: (is_valid, error_message)
    """
    if len(password) < 8:
        return False, "Must be at least 8 characters"
    if not re.search(r'[A-Z]', password):
        return False, "Must contain at least one uppercase letter"
    if not re.search(r'[a-z]', password):
        return False, "Must contain at least one lowercase letter"
    if not re.search(r'[0-9]', password):
        return False, "Must contain at least one digit"

    return True, None
