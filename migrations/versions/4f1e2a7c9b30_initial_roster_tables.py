"""users, employees, shifts, shift_assignments

Revision ID: 4f1e2a7c9b30
Revises:
Create Date: 2026-10-17 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '4f1e2a7c9b30'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('username', sa.String(length=50), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_users_username', 'users', ['username'], unique=True)

    op.create_table(
        'employees',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('employee_code', sa.String(length=32), nullable=False),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('phone', sa.String(length=20), nullable=True),
        sa.Column('department', sa.String(length=80), nullable=True),
        sa.Column('position', sa.String(length=80), nullable=True),
        sa.Column('hire_date', sa.Date(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_employees_employee_code', 'employees', ['employee_code'], unique=True)
    op.create_index('ix_emp_name', 'employees', ['name'], unique=False)

    op.create_table(
        'shifts',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('start_time', sa.Time(), nullable=False),
        sa.Column('end_time', sa.Time(), nullable=False),
        sa.Column('location', sa.String(length=200), nullable=True),
        sa.Column('description', sa.String(length=500), nullable=True),
        sa.Column('max_employees', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint('max_employees IS NULL OR max_employees >= 1', name='ck_shift_max_employees'),
    )
    op.create_index('ix_shift_date_start', 'shifts', ['date', 'start_time'], unique=False)

    op.create_table(
        'shift_assignments',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('shift_id', sa.Integer(), sa.ForeignKey('shifts.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('employee_id', sa.Integer(), sa.ForeignKey('employees.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.Column('assigned_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.UniqueConstraint('shift_id', 'employee_id', name='uq_shift_assignment_pair'),
        sa.CheckConstraint("status IN ('assigned', 'completed', 'cancelled')", name='ck_shift_assignment_status'),
    )
    op.create_index('ix_shift_assignments_shift_id', 'shift_assignments', ['shift_id'], unique=False)
    op.create_index('ix_shift_assignments_employee_id', 'shift_assignments', ['employee_id'], unique=False)
    op.create_index('ix_shift_assignments_assigned_at', 'shift_assignments', ['assigned_at'], unique=False)
    op.create_index('ix_sa_shift_status', 'shift_assignments', ['shift_id', 'status'], unique=False)


def downgrade() -> None:
    op.drop_table('shift_assignments')
    op.drop_table('shifts')
    op.drop_table('employees')
    op.drop_table('users')
