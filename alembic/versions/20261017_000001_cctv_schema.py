"""CCTV schema: cameras, geofence zones, events and recordings.

Revision ID: 0001
Revises:
Create Date: 2026-10-17

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _enum(*values: str, name: str) -> postgresql.ENUM:
    return postgresql.ENUM(*values, name=name, create_type=False)


def upgrade() -> None:
    # Create ENUM types
    op.execute("CREATE TYPE camerastatus AS ENUM ('online', 'offline', 'maintenance', 'error')")
    op.execute("CREATE TYPE cameratype AS ENUM ('fixed', 'ptz', 'dome', 'bullet')")
    op.execute("CREATE TYPE resolution AS ENUM ('720p', '1080p', '4K')")
    op.execute("CREATE TYPE zonetype AS ENUM ('restricted', 'monitoring', 'alert', 'emergency')")
    op.execute("CREATE TYPE zonepriority AS ENUM ('low', 'medium', 'high', 'critical')")
    op.execute(
        "CREATE TYPE eventtype AS ENUM ('motion_detected', 'zone_breach', 'camera_offline', "
        "'recording_started', 'alert_triggered')"
    )
    op.execute("CREATE TYPE severity AS ENUM ('info', 'warning', 'critical')")
    op.execute(
        "CREATE TYPE triggertype AS ENUM ('manual', 'motion', 'zone_breach', 'incident', 'scheduled')"
    )
    op.execute("CREATE TYPE recordingstatus AS ENUM ('recording', 'completed', 'failed', 'processing')")

    # Create cameras table
    op.create_table(
        'cctv_cameras',
        sa.Column('id', sa.String(64), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('location', sa.String(255), nullable=False, server_default=''),
        sa.Column('latitude', sa.Float, nullable=False, server_default='0'),
        sa.Column('longitude', sa.Float, nullable=False, server_default='0'),
        sa.Column('status', _enum('online', 'offline', 'maintenance', 'error', name='camerastatus'), nullable=False, server_default='offline'),
        sa.Column('type', _enum('fixed', 'ptz', 'dome', 'bullet', name='cameratype'), nullable=False, server_default='fixed'),
        sa.Column('resolution', _enum('720p', '1080p', '4K', name='resolution'), nullable=False, server_default='1080p'),
        sa.Column('has_audio', sa.Boolean, nullable=False, server_default='false'),
        sa.Column('has_night_vision', sa.Boolean, nullable=False, server_default='false'),
        sa.Column('has_motion_detection', sa.Boolean, nullable=False, server_default='false'),
        sa.Column('motion_sensitivity', sa.Integer, nullable=True),
        sa.Column('zone_ids', sa.JSON, nullable=False, server_default='[]'),
        sa.Column('stream_url', sa.Text, nullable=True),
        sa.Column('thumbnail_url', sa.Text, nullable=True),
        sa.Column('ptz_position', sa.JSON, nullable=True),
        sa.Column('last_ping', sa.DateTime, nullable=True),
        sa.Column('created_at', sa.DateTime, server_default=sa.text("(now() at time zone 'utc')"), nullable=False),
        sa.Column('updated_at', sa.DateTime, server_default=sa.text("(now() at time zone 'utc')"), nullable=False),
    )
    op.create_index('ix_cctv_cameras_status', 'cctv_cameras', ['status'])

    # Create geofence zones table
    op.create_table(
        'cctv_geofence_zones',
        sa.Column('id', sa.String(64), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('type', _enum('restricted', 'monitoring', 'alert', 'emergency', name='zonetype'), nullable=False, server_default='monitoring'),
        sa.Column('coordinates', sa.JSON, nullable=False, server_default='[]'),
        sa.Column('center', sa.JSON, nullable=True),
        sa.Column('radius', sa.Float, nullable=True),
        sa.Column('is_active', sa.Boolean, nullable=False, server_default='true'),
        sa.Column('priority', _enum('low', 'medium', 'high', 'critical', name='zonepriority'), nullable=False, server_default='medium'),
        sa.Column('camera_ids', sa.JSON, nullable=False, server_default='[]'),
        sa.Column('auto_recording', sa.Boolean, nullable=False, server_default='false'),
        sa.Column('alert_settings', sa.JSON, nullable=False, server_default='{}'),
        sa.Column('schedule', sa.JSON, nullable=True),
        sa.Column('created_at', sa.DateTime, server_default=sa.text("(now() at time zone 'utc')"), nullable=False),
        sa.Column('updated_at', sa.DateTime, server_default=sa.text("(now() at time zone 'utc')"), nullable=False),
    )
    op.create_index('ix_cctv_zones_active', 'cctv_geofence_zones', ['is_active'])

    # Create events table
    op.create_table(
        'cctv_events',
        sa.Column('id', sa.String(64), primary_key=True),
        sa.Column('camera_id', sa.String(64), nullable=False),
        sa.Column('camera_name', sa.String(255), nullable=False),
        sa.Column('zone_id', sa.String(64), nullable=True),
        sa.Column('zone_name', sa.String(255), nullable=True),
        sa.Column('event_type', _enum('motion_detected', 'zone_breach', 'camera_offline', 'recording_started', 'alert_triggered', name='eventtype'), nullable=False),
        sa.Column('severity', _enum('info', 'warning', 'critical', name='severity'), nullable=False, server_default='info'),
        sa.Column('timestamp', sa.DateTime, server_default=sa.text("(now() at time zone 'utc')"), nullable=False),
        sa.Column('metadata', sa.JSON, nullable=True),
        sa.Column('acknowledged', sa.Boolean, nullable=False, server_default='false'),
        sa.Column('acknowledged_by', sa.String(255), nullable=True),
        sa.Column('acknowledged_at', sa.DateTime, nullable=True),
    )
    op.create_index('ix_cctv_events_camera_id', 'cctv_events', ['camera_id'])
    op.create_index('ix_cctv_events_timestamp', 'cctv_events', ['timestamp'])

    # Create recordings table
    op.create_table(
        'cctv_recordings',
        sa.Column('id', sa.String(64), primary_key=True),
        sa.Column('camera_id', sa.String(64), nullable=False),
        sa.Column('camera_name', sa.String(255), nullable=False),
        sa.Column('start_time', sa.DateTime, nullable=False),
        sa.Column('end_time', sa.DateTime, nullable=True),
        sa.Column('duration', sa.Float, nullable=True),
        sa.Column('max_duration', sa.Float, nullable=True),
        sa.Column('file_size', sa.BigInteger, nullable=True),
        sa.Column('storage_location', sa.String(500), nullable=False),
        sa.Column('trigger_type', _enum('manual', 'motion', 'zone_breach', 'incident', 'scheduled', name='triggertype'), nullable=False, server_default='manual'),
        sa.Column('status', _enum('recording', 'completed', 'failed', 'processing', name='recordingstatus'), nullable=False, server_default='recording'),
        sa.Column('thumbnail_url', sa.Text, nullable=True),
        sa.Column('video_url', sa.Text, nullable=True),
    )
    op.create_index('ix_cctv_recordings_camera_id', 'cctv_recordings', ['camera_id'])
    op.create_index('ix_cctv_recordings_status', 'cctv_recordings', ['status'])


def downgrade() -> None:
    # Drop tables
    op.drop_table('cctv_recordings')
    op.drop_table('cctv_events')
    op.drop_table('cctv_geofence_zones')
    op.drop_table('cctv_cameras')

    # Drop ENUM types
    op.execute("DROP TYPE IF EXISTS recordingstatus")
    op.execute("DROP TYPE IF EXISTS triggertype")
    op.execute("DROP TYPE IF EXISTS severity")
    op.execute("DROP TYPE IF EXISTS eventtype")
    op.execute("DROP TYPE IF EXISTS zonepriority")
    op.execute("DROP TYPE IF EXISTS zonetype")
    op.execute("DROP TYPE IF EXISTS resolution")
    op.execute("DROP TYPE IF EXISTS cameratype")
    op.execute("DROP TYPE IF EXISTS camerastatus")
