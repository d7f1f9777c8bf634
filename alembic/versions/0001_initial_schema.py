"""create users, tasks and id_counters tables

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '0001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None


USER_ROLES = ('user', 'admin', 'project_manager', 'team_lead', 'developer', 'designer', 'qa')
USER_STATUSES = ('pending', 'active', 'inactive', 'rejected')
DEPARTMENTS = (
    'engineering', 'design', 'product_management', 'quality_assurance',
    'marketing', 'sales', 'human_resources',
)
GENDERS = ('Male', 'Female', 'Prefer not to say')
TASK_TYPES = ('task', 'engineering_request', 'business_onboarding', 'functionality_review')
TASK_PRIORITIES = ('low', 'medium', 'high', 'urgent')
# 'inProgress' is kept so legacy rows still load
TASK_STATUSES = ('new', 'in_progress', 'in_review', 'completed', 'inProgress')


def upgrade() -> None:
    op.create_table('users',
        sa.Column('id', sa.String(length=128), primary_key=True, nullable=False, comment='Identity provider subject id'),
        sa.Column('name', sa.String(length=255), nullable=True, comment="User's full name"),
        sa.Column('email', sa.String(length=255), nullable=True, comment="User's email address"),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('photo', sa.Text(), nullable=True, comment="URL to user's profile photo"),
        sa.Column('birth_date', sa.Date(), nullable=True),
        sa.Column('gender', sa.Enum(*GENDERS, name='gender'), nullable=True),
        sa.Column('role', sa.Enum(*USER_ROLES, name='userrole'), nullable=False, server_default='user'),
        sa.Column('status', sa.Enum(*USER_STATUSES, name='userstatus'), nullable=False, server_default='pending'),
        sa.Column('department', sa.Enum(*DEPARTMENTS, name='department'), nullable=True),
        sa.Column('designation', sa.String(length=255), nullable=True),
        sa.Column('employee_id', sa.String(length=32), nullable=True, unique=True, comment='Sequential employee number assigned on admin creation'),
        sa.Column('is_deleted', sa.Boolean(), nullable=False, server_default=sa.false(), comment='Whether the user has been soft deleted'),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
    )
    op.create_index('ix_users_email', 'users', ['email'])
    op.create_index('ix_users_status', 'users', ['status'])

    op.create_table('tasks',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column('requested_by_id', sa.String(length=128), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('assigned_to_id', sa.String(length=128), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False, comment='Task title/name'),
        sa.Column('type', sa.Enum(*TASK_TYPES, name='tasktype'), nullable=False, server_default='task'),
        sa.Column('priority', sa.Enum(*TASK_PRIORITIES, name='taskpriority'), nullable=False, server_default='medium'),
        sa.Column('status', sa.Enum(*TASK_STATUSES, name='taskstatus'), nullable=False, server_default='new'),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('business_justification', sa.Text(), nullable=False),
        sa.Column('technical_requirements', sa.Text(), nullable=True),
        sa.Column('dependencies', sa.Text(), nullable=True),
        sa.Column('acceptance_criteria', sa.Text(), nullable=False),
        sa.Column('admin_panel_link', sa.String(length=2048), nullable=True),
        sa.Column('story_points', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('progress', sa.Integer(), nullable=True, server_default='0', comment='0-100'),
        sa.Column('attachments', sa.JSON(), nullable=False, comment='Ordered list of attachment URLs'),
        sa.Column('target_completion_date', sa.Date(), nullable=False),
        sa.Column('completed_at', sa.DateTime(), nullable=True, comment='When task was completed'),
        sa.Column('is_deleted', sa.Boolean(), nullable=False, server_default=sa.false(), comment='Whether the task has been soft deleted'),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
    )
    op.create_index('ix_tasks_requested_by_id', 'tasks', ['requested_by_id'])
    op.create_index('ix_tasks_assigned_to_id', 'tasks', ['assigned_to_id'])
    op.create_index('ix_tasks_priority', 'tasks', ['priority'])
    op.create_index('ix_tasks_status', 'tasks', ['status'])
    op.create_index('ix_tasks_target_completion_date', 'tasks', ['target_completion_date'])

    op.create_table('id_counters',
        sa.Column('name', sa.String(length=64), primary_key=True, nullable=False),
        sa.Column('value', sa.BigInteger(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
    )


def downgrade() -> None:
    op.drop_table('id_counters')

    op.drop_index('ix_tasks_target_completion_date', table_name='tasks')
    op.drop_index('ix_tasks_status', table_name='tasks')
    op.drop_index('ix_tasks_priority', table_name='tasks')
    op.drop_index('ix_tasks_assigned_to_id', table_name='tasks')
    op.drop_index('ix_tasks_requested_by_id', table_name='tasks')
    op.drop_table('tasks')

    op.drop_index('ix_users_status', table_name='users')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')

    bind = op.get_bind()
    for name in ('taskstatus', 'taskpriority', 'tasktype', 'department', 'userstatus', 'userrole', 'gender'):
        sa.Enum(name=name).drop(bind, checkfirst=True)
