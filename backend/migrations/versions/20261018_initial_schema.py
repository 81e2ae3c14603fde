"""Initial schema: users, sessions, employees, categories, assets, history, requests

Revision ID: 20261018_initial
Revises:
Create Date: 2026-10-18

This migration adds:
1. users and session_tokens (bearer-token auth)
2. employees (asset holders) and categories
3. assets with optimistic version counter (version_id)
4. asset_history (append-only lifecycle log)
5. asset_requests (request -> review workflow)
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '20261018_initial'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    # ==========================================================================
    # 1. USERS AND SESSIONS
    # ==========================================================================
    op.create_table('users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=16), nullable=False, server_default='Employee'),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='active'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.Column('last_login_at', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("role IN ('Admin', 'Manager', 'Employee')", name='ck_users_role'),
        sa.CheckConstraint("status IN ('active', 'inactive')", name='ck_users_status'),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('users', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_users_email'), ['email'], unique=True)

    op.create_table('session_tokens',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('token_hash', sa.String(length=255), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.Column('last_used_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('is_revoked', sa.Boolean(), nullable=False, server_default='0'),
        sa.Column('revoked_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('revoked_reason', sa.String(length=255), nullable=True),
        sa.Column('user_agent', sa.String(length=512), nullable=True),
        sa.Column('ip_address', sa.String(length=45), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('session_tokens', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_session_tokens_user_id'), ['user_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_session_tokens_token_hash'), ['token_hash'], unique=True)
        batch_op.create_index(batch_op.f('ix_session_tokens_expires_at'), ['expires_at'], unique=False)
        batch_op.create_index(batch_op.f('ix_session_tokens_is_revoked'), ['is_revoked'], unique=False)
        batch_op.create_index('ix_session_tokens_user_active', ['user_id', 'is_revoked'], unique=False)

    # ==========================================================================
    # 2. EMPLOYEES AND CATEGORIES
    # ==========================================================================
    op.create_table('employees',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('employee_id', sa.String(length=50), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('department', sa.String(length=100), nullable=False),
        sa.Column('designation', sa.String(length=100), nullable=True),
        sa.Column('contact', sa.String(length=30), nullable=True),
        sa.Column('branch', sa.String(length=100), nullable=False, server_default='Head Office'),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='active'),
        sa.Column('joining_date', sa.Date(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.CheckConstraint("status IN ('active', 'inactive')", name='ck_employees_status'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('employee_id'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('employees', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_employees_email'), ['email'], unique=True)
        batch_op.create_index('ix_employees_department', ['department'], unique=False)

    op.create_table('categories',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('code', sa.String(length=10), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='active'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.CheckConstraint("status IN ('active', 'inactive')", name='ck_categories_status'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name'),
        sa.UniqueConstraint('code'),
        sqlite_autoincrement=True
    )

    # ==========================================================================
    # 3. ASSETS
    # ==========================================================================
    op.create_table('assets',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('asset_tag', sa.String(length=64), nullable=False),
        sa.Column('serial_number', sa.String(length=128), nullable=False),
        sa.Column('category_id', sa.Integer(), nullable=False),
        sa.Column('make', sa.String(length=100), nullable=False),
        sa.Column('model', sa.String(length=100), nullable=False),
        sa.Column('specifications', sa.Text(), nullable=True),
        sa.Column('purchase_date', sa.Date(), nullable=True),
        sa.Column('purchase_price', sa.Numeric(precision=10, scale=2), nullable=False, server_default='0'),
        sa.Column('warranty_expiry', sa.Date(), nullable=True),
        sa.Column('vendor', sa.String(length=255), nullable=True),
        sa.Column('branch', sa.String(length=100), nullable=False, server_default='Head Office'),
        sa.Column('location', sa.String(length=255), nullable=True),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='Available'),
        sa.Column('condition', sa.String(length=16), nullable=False, server_default='Good'),
        sa.Column('image_url', sa.String(length=500), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('version_id', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.CheckConstraint("status IN ('Available', 'Assigned', 'Under Repair', 'Scrapped')", name='ck_assets_status'),
        sa.CheckConstraint("condition IN ('Excellent', 'Good', 'Fair', 'Poor')", name='ck_assets_condition'),
        sa.ForeignKeyConstraint(['category_id'], ['categories.id'], ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('asset_tag'),
        sa.UniqueConstraint('serial_number'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('assets', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_assets_category_id'), ['category_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_assets_created_at'), ['created_at'], unique=False)
        batch_op.create_index('ix_assets_status', ['status'], unique=False)
        batch_op.create_index('ix_assets_branch', ['branch'], unique=False)

    # ==========================================================================
    # 4. ASSET HISTORY
    # ==========================================================================
    op.create_table('asset_history',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('asset_id', sa.Integer(), nullable=False),
        sa.Column('employee_id', sa.Integer(), nullable=True),
        sa.Column('action', sa.String(length=16), nullable=False),
        sa.Column('action_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('condition', sa.String(length=16), nullable=True),
        sa.Column('reason', sa.Text(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('performed_by', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.CheckConstraint("action IN ('Purchase', 'Issue', 'Return', 'Repair', 'Scrap', 'Transfer')", name='ck_asset_history_action'),
        sa.CheckConstraint(
            "condition IS NULL OR condition IN ('Excellent', 'Good', 'Fair', 'Poor')",
            name='ck_asset_history_condition'
        ),
        sa.ForeignKeyConstraint(['asset_id'], ['assets.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['employee_id'], ['employees.id'], ),
        sa.ForeignKeyConstraint(['performed_by'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('asset_history', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_asset_history_action_date'), ['action_date'], unique=False)
        batch_op.create_index(batch_op.f('ix_asset_history_performed_by'), ['performed_by'], unique=False)
        batch_op.create_index('ix_asset_history_asset_date', ['asset_id', 'action_date'], unique=False)
        batch_op.create_index('ix_asset_history_employee', ['employee_id'], unique=False)

    # ==========================================================================
    # 5. ASSET REQUESTS
    # ==========================================================================
    op.create_table('asset_requests',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('employee_id', sa.Integer(), nullable=False),
        sa.Column('requested_by', sa.Integer(), nullable=False),
        sa.Column('category_id', sa.Integer(), nullable=True),
        sa.Column('asset_type', sa.String(length=100), nullable=False),
        sa.Column('justification', sa.Text(), nullable=False),
        sa.Column('priority', sa.String(length=16), nullable=False, server_default='Medium'),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='Pending'),
        sa.Column('request_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('reviewed_by', sa.Integer(), nullable=True),
        sa.Column('review_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('review_notes', sa.Text(), nullable=True),
        sa.Column('assigned_asset_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.CheckConstraint("priority IN ('Low', 'Medium', 'High', 'Urgent')", name='ck_asset_requests_priority'),
        sa.CheckConstraint("status IN ('Pending', 'Approved', 'Rejected', 'Fulfilled')", name='ck_asset_requests_status'),
        sa.ForeignKeyConstraint(['employee_id'], ['employees.id'], ),
        sa.ForeignKeyConstraint(['requested_by'], ['users.id'], ),
        sa.ForeignKeyConstraint(['reviewed_by'], ['users.id'], ),
        sa.ForeignKeyConstraint(['category_id'], ['categories.id'], ),
        sa.ForeignKeyConstraint(['assigned_asset_id'], ['assets.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('asset_requests', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_asset_requests_employee_id'), ['employee_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_asset_requests_requested_by'), ['requested_by'], unique=False)
        batch_op.create_index(batch_op.f('ix_asset_requests_request_date'), ['request_date'], unique=False)
        batch_op.create_index('ix_asset_requests_status', ['status'], unique=False)


def downgrade():
    op.drop_table('asset_requests')
    op.drop_table('asset_history')
    op.drop_table('assets')
    op.drop_table('categories')
    op.drop_table('employees')
    op.drop_table('session_tokens')
    op.drop_table('users')
