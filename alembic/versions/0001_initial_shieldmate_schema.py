"""initial shieldmate schema

Revision ID: 0001_initial_shieldmate_schema
Revises:
Create Date: 2026-10-17 09:12:40.118204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001_initial_shieldmate_schema'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# SQLModel persists enum members by name, hence the uppercase labels
user_role = sa.Enum(
    'VOLUNTEER', 'ORGANIZATION_OWNER', 'TEAM_MEMBER', 'SUPER_ADMIN', name='userrole'
)
member_role = sa.Enum('OWNER', 'TEAM_MEMBER', name='memberrole')
organization_status = sa.Enum(
    'PENDING_VERIFICATION', 'APPROVED', 'REJECTED', name='organizationstatus'
)
difficulty_level = sa.Enum(
    'BEGINNER', 'INTERMEDIATE', 'ADVANCED', 'EXPERT', name='difficultylevel'
)
mission_status = sa.Enum(
    'OPEN', 'IN_PROGRESS', 'PENDING_CLOSURE', 'COMPLETED', name='missionstatus'
)
application_status = sa.Enum('PENDING', 'ACCEPTED', 'REJECTED', name='applicationstatus')
notification_type = sa.Enum(
    'APPLICATION_RECEIVED', 'APPLICATION_ACCEPTED', 'APPLICATION_REJECTED',
    'CLOSURE_PROPOSED', 'CLOSURE_CONFIRMED', 'CLOSURE_DISPUTED',
    'MISSION_AUTO_COMPLETED',
    name='notificationtype',
)


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'user',
        sa.Column('id_user', sa.Integer(), nullable=False),
        sa.Column('username', sa.String(length=50), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('first_name', sa.String(length=50), nullable=False),
        sa.Column('last_name', sa.String(length=50), nullable=False),
        sa.Column('role', user_role, nullable=False),
        sa.Column('hashed_password', sa.String(), nullable=False),
        sa.Column('date_creation', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id_user'),
    )
    op.create_index('ix_user_username', 'user', ['username'], unique=True)
    op.create_index('ix_user_email', 'user', ['email'], unique=True)
    op.create_index('ix_user_role', 'user', ['role'])

    op.create_table(
        'organization',
        sa.Column('id_org', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('description', sa.String(length=2000), nullable=True),
        sa.Column('contact_email', sa.String(length=255), nullable=True),
        sa.Column('website_url', sa.String(length=255), nullable=True),
        sa.Column('status', organization_status, nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id_org'),
    )
    op.create_index('ix_organization_status', 'organization', ['status'])

    op.create_table(
        'organization_member',
        sa.Column('id_member', sa.Integer(), nullable=False),
        sa.Column('id_org', sa.Integer(), nullable=False),
        sa.Column('id_user', sa.Integer(), nullable=False),
        sa.Column('role', member_role, nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['id_org'], ['organization.id_org']),
        sa.ForeignKeyConstraint(['id_user'], ['user.id_user']),
        sa.PrimaryKeyConstraint('id_member'),
        sa.UniqueConstraint('id_org', 'id_user', name='uq_organization_member_org_user'),
    )
    op.create_index('ix_organization_member_id_org', 'organization_member', ['id_org'])
    op.create_index('ix_organization_member_id_user', 'organization_member', ['id_user'])

    op.create_table(
        'skill',
        sa.Column('id_skill', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=80), nullable=False),
        sa.PrimaryKeyConstraint('id_skill'),
    )
    op.create_index('ix_skill_name', 'skill', ['name'], unique=True)

    op.create_table(
        'mission_template',
        sa.Column('id_template', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=150), nullable=False),
        sa.Column('description', sa.String(length=3000), nullable=False),
        sa.Column('estimated_hours', sa.Integer(), nullable=True),
        sa.Column('difficulty_level', difficulty_level, nullable=True),
        sa.PrimaryKeyConstraint('id_template'),
    )

    op.create_table(
        'mission_template_skill',
        sa.Column('id_template', sa.Integer(), nullable=False),
        sa.Column('id_skill', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['id_template'], ['mission_template.id_template']),
        sa.ForeignKeyConstraint(['id_skill'], ['skill.id_skill']),
        sa.PrimaryKeyConstraint('id_template', 'id_skill'),
    )

    op.create_table(
        'mission',
        sa.Column('id_mission', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=150), nullable=False),
        sa.Column('description', sa.String(length=3000), nullable=False),
        sa.Column('id_template', sa.Integer(), nullable=False),
        sa.Column('estimated_hours', sa.Integer(), nullable=True),
        sa.Column('difficulty_level', difficulty_level, nullable=True),
        sa.Column('id_org', sa.Integer(), nullable=False),
        sa.Column('status', mission_status, nullable=False),
        sa.Column('closure_initiator_id', sa.Integer(), nullable=True),
        sa.Column('closure_initiated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('closed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['id_template'], ['mission_template.id_template']),
        sa.ForeignKeyConstraint(['id_org'], ['organization.id_org']),
        sa.ForeignKeyConstraint(['closure_initiator_id'], ['user.id_user']),
        sa.PrimaryKeyConstraint('id_mission'),
    )
    op.create_index('ix_mission_id_org', 'mission', ['id_org'])
    op.create_index('ix_mission_status', 'mission', ['status'])

    op.create_table(
        'mission_application',
        sa.Column('id_application', sa.Integer(), nullable=False),
        sa.Column('id_mission', sa.Integer(), nullable=False),
        sa.Column('id_volunteer', sa.Integer(), nullable=False),
        sa.Column('application_message', sa.String(length=2000), nullable=True),
        sa.Column('status', application_status, nullable=False),
        sa.Column('applied_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('decided_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['id_mission'], ['mission.id_mission']),
        sa.ForeignKeyConstraint(['id_volunteer'], ['user.id_user']),
        sa.PrimaryKeyConstraint('id_application'),
        sa.UniqueConstraint(
            'id_mission', 'id_volunteer', name='uq_mission_application_volunteer'
        ),
    )
    op.create_index(
        'ix_mission_application_id_mission', 'mission_application', ['id_mission']
    )
    op.create_index(
        'ix_mission_application_id_volunteer', 'mission_application', ['id_volunteer']
    )
    op.create_index('ix_mission_application_status', 'mission_application', ['status'])

    op.create_table(
        'mission_rating',
        sa.Column('id_rating', sa.Integer(), nullable=False),
        sa.Column('id_mission', sa.Integer(), nullable=False),
        sa.Column('rater_user_id', sa.Integer(), nullable=False),
        sa.Column('rated_user_id', sa.Integer(), nullable=False),
        sa.Column('rating', sa.Integer(), nullable=False),
        sa.Column('review_text', sa.String(length=2000), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['id_mission'], ['mission.id_mission']),
        sa.ForeignKeyConstraint(['rater_user_id'], ['user.id_user']),
        sa.ForeignKeyConstraint(['rated_user_id'], ['user.id_user']),
        sa.PrimaryKeyConstraint('id_rating'),
        sa.UniqueConstraint('id_mission', 'rater_user_id', name='uq_mission_rating_rater'),
        sa.CheckConstraint('rating BETWEEN 1 AND 5', name='ck_mission_rating_range'),
    )
    op.create_index('ix_mission_rating_id_mission', 'mission_rating', ['id_mission'])
    op.create_index('ix_mission_rating_rated_user_id', 'mission_rating', ['rated_user_id'])

    op.create_table(
        'notification',
        sa.Column('id_notification', sa.Integer(), nullable=False),
        sa.Column('id_user', sa.Integer(), nullable=False),
        sa.Column('notification_type', notification_type, nullable=False),
        sa.Column('message', sa.String(length=500), nullable=False),
        sa.Column('link_url', sa.String(length=255), nullable=True),
        sa.Column('related_mission_id', sa.Integer(), nullable=True),
        sa.Column('is_read', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column(
            'created_at',
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.ForeignKeyConstraint(
            ['id_user'], ['user.id_user'],
            ondelete='CASCADE', name='notification_id_user_fkey',
        ),
        sa.ForeignKeyConstraint(
            ['related_mission_id'], ['mission.id_mission'],
            ondelete='CASCADE', name='notification_related_mission_id_fkey',
        ),
        sa.PrimaryKeyConstraint('id_notification'),
    )
    op.create_index('ix_notification_id_user', 'notification', ['id_user'])
    op.create_index('ix_notification_created_at', 'notification', ['created_at'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('ix_notification_created_at', table_name='notification')
    op.drop_index('ix_notification_id_user', table_name='notification')
    op.drop_table('notification')
    op.drop_index('ix_mission_rating_rated_user_id', table_name='mission_rating')
    op.drop_index('ix_mission_rating_id_mission', table_name='mission_rating')
    op.drop_table('mission_rating')
    op.drop_index('ix_mission_application_status', table_name='mission_application')
    op.drop_index('ix_mission_application_id_volunteer', table_name='mission_application')
    op.drop_index('ix_mission_application_id_mission', table_name='mission_application')
    op.drop_table('mission_application')
    op.drop_index('ix_mission_status', table_name='mission')
    op.drop_index('ix_mission_id_org', table_name='mission')
    op.drop_table('mission')
    op.drop_table('mission_template_skill')
    op.drop_table('mission_template')
    op.drop_index('ix_skill_name', table_name='skill')
    op.drop_table('skill')
    op.drop_index('ix_organization_member_id_user', table_name='organization_member')
    op.drop_index('ix_organization_member_id_org', table_name='organization_member')
    op.drop_table('organization_member')
    op.drop_index('ix_organization_status', table_name='organization')
    op.drop_table('organization')
    op.drop_index('ix_user_role', table_name='user')
    op.drop_index('ix_user_email', table_name='user')
    op.drop_index('ix_user_username', table_name='user')
    op.drop_table('user')

    bind = op.get_bind()
    for enum_type in (
        notification_type,
        application_status,
        mission_status,
        difficulty_level,
        organization_status,
        member_role,
        user_role,
    ):
        enum_type.drop(bind, checkfirst=True)
