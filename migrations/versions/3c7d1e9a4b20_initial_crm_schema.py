"""Initial CRM schema: users, clients, contacts, visits, expenses and documents

Revision ID: 3c7d1e9a4b20
Revises:
Create Date: 2026-10-18 19:20:41.512304

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import mysql


# revision identifiers, used by Alembic.
revision = '3c7d1e9a4b20'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table('users',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('username', sa.String(length=64), nullable=False),
        sa.Column('name', sa.String(length=128), nullable=False),
        sa.Column('role', sa.Enum('admin', 'commercial', name='user_role'), nullable=False),
        sa.Column('password_hash', sa.String(length=256), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('last_login', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_users_username', 'users', ['username'], unique=True)

    op.create_table('clients',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('address', sa.String(length=255), nullable=False),
        sa.Column('lat', sa.Float(), nullable=False),
        sa.Column('lng', sa.Float(), nullable=False),
        sa.Column('contact_name', sa.String(length=255), nullable=True),
        sa.Column('phones', sa.JSON(), nullable=False),
        sa.Column('emails', sa.JSON(), nullable=False),
        sa.Column('total_time_spent_minutes', sa.Integer(), nullable=False),
        sa.Column('visit_ids', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_clients_name', 'clients', ['name'], unique=False)

    op.create_table('contacts',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('client_id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=255), nullable=False),
        sa.Column('phone', sa.String(length=64), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['client_id'], ['clients.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_contacts_client_id', 'contacts', ['client_id'], unique=False)

    op.create_table('visits',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('client_id', sa.String(length=36), nullable=True),
        sa.Column('user_id', sa.String(length=36), nullable=True),
        sa.Column('place_id', sa.String(length=255), nullable=False),
        sa.Column('place_name', sa.String(length=255), nullable=False),
        sa.Column('place_address', sa.String(length=255), nullable=False),
        sa.Column('timestamp', sa.BigInteger(), nullable=False),
        sa.Column('feedback', sa.Text(), nullable=False),
        sa.Column('status', sa.Enum('aceptado', 'rechazado', 'propuesta', name='visit_status'), nullable=False),
        sa.Column('tags', sa.JSON(), nullable=False),
        sa.Column('lat', sa.Float(), nullable=False),
        sa.Column('lng', sa.Float(), nullable=False),
        sa.Column('duration_minutes', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['client_id'], ['clients.id'], ),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_visits_client_id', 'visits', ['client_id'], unique=False)
    op.create_index('ix_visits_user_id', 'visits', ['user_id'], unique=False)
    op.create_index('ix_visits_timestamp', 'visits', ['timestamp'], unique=False)

    op.create_table('expenses',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('client_id', sa.String(length=36), nullable=True),
        sa.Column('visit_id', sa.String(length=36), nullable=True),
        sa.Column('amount', sa.Float(), nullable=False),
        sa.Column('concept', sa.String(length=255), nullable=False),
        sa.Column('date', sa.BigInteger(), nullable=False),
        sa.ForeignKeyConstraint(['client_id'], ['clients.id'], ),
        sa.ForeignKeyConstraint(['visit_id'], ['visits.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_expenses_client_id', 'expenses', ['client_id'], unique=False)
    op.create_index('ix_expenses_visit_id', 'expenses', ['visit_id'], unique=False)

    op.create_table('documents',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('client_id', sa.String(length=36), nullable=True),
        sa.Column('visit_id', sa.String(length=36), nullable=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('type', sa.Enum('pdf', 'img', 'doc', 'audio', name='document_type'), nullable=False),
        sa.Column('date', sa.BigInteger(), nullable=False),
        sa.Column('data', sa.Text().with_variant(mysql.LONGTEXT(), 'mysql'), nullable=True),
        sa.ForeignKeyConstraint(['client_id'], ['clients.id'], ),
        sa.ForeignKeyConstraint(['visit_id'], ['visits.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_documents_client_id', 'documents', ['client_id'], unique=False)
    op.create_index('ix_documents_visit_id', 'documents', ['visit_id'], unique=False)


def downgrade():
    op.drop_table('documents')
    op.drop_table('expenses')
    op.drop_table('visits')
    op.drop_table('contacts')
    op.drop_table('clients')
    op.drop_table('users')
