"""initial_grid_schema

Revision ID: b41e7c02d9a5
Revises:
Create Date: 2026-10-01 10:00:00.000000

Grid nodes (with the two default nodes), sensor readings, alarms,
maintenance events.
"""
from datetime import datetime
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = 'b41e7c02d9a5'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

node_type = sa.Enum('Substation', 'Distribution', 'Transmission', name='nodetype')
node_status = sa.Enum('Online', 'Offline', 'Maintenance', 'Alarm', name='nodestatus')
alarm_severity = sa.Enum('Critical', 'High', 'Medium', 'Low', name='alarmseverity')
alarm_status = sa.Enum('Active', 'Acknowledged', 'Resolved', name='alarmstatus')
maintenance_type = sa.Enum('Scheduled', 'Emergency', 'Preventive', name='maintenanceeventtype')
maintenance_status = sa.Enum(
    'Planned', 'InProgress', 'Completed', 'Cancelled', name='maintenanceeventstatus'
)


def upgrade() -> None:
    # --- grid_nodes ---
    grid_nodes = op.create_table(
        'grid_nodes',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('node_id', sa.String(50), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('location', sa.String(200), nullable=True),
        sa.Column('node_type', node_type, nullable=False),
        sa.Column('capacity', sa.Float(), nullable=False),
        sa.Column('status', node_status, nullable=False),
        sa.Column('installation_date', sa.DateTime(), nullable=False),
        sa.Column('last_maintenance_date', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint('node_id', name='uq_grid_nodes_node_id'),
    )
    op.bulk_insert(grid_nodes, [
        {
            'node_id': 'GRID-NODE-001',
            'name': 'Oslo Central Substation',
            'location': 'Oslo, Norway',
            'node_type': 'Substation',
            'capacity': 150.5,
            'status': 'Online',
            'installation_date': datetime(2020, 1, 15),
        },
        {
            'node_id': 'GRID-NODE-002',
            'name': 'Bergen Power Distribution',
            'location': 'Bergen, Norway',
            'node_type': 'Distribution',
            'capacity': 85.0,
            'status': 'Online',
            'installation_date': datetime(2019, 6, 20),
        },
    ])

    # --- sensor_readings ---
    op.create_table(
        'sensor_readings',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('grid_node_id', sa.Integer(), sa.ForeignKey('grid_nodes.id', ondelete='CASCADE'), nullable=False),
        sa.Column('timestamp', sa.DateTime(), nullable=False),
        sa.Column('voltage', sa.Numeric(10, 2), nullable=False),
        sa.Column('current', sa.Numeric(10, 2), nullable=False),
        sa.Column('power', sa.Numeric(12, 2), nullable=False),
        sa.Column('frequency', sa.Numeric(6, 2), nullable=False),
        sa.Column('temperature', sa.Numeric(5, 2), nullable=False),
        sa.Column('power_factor', sa.Numeric(4, 3), nullable=False),
    )
    op.create_index('ix_sensor_readings_node_ts', 'sensor_readings', ['grid_node_id', 'timestamp'])

    # --- alarms ---
    op.create_table(
        'alarms',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('grid_node_id', sa.Integer(), sa.ForeignKey('grid_nodes.id', ondelete='CASCADE'), nullable=False),
        sa.Column('alarm_code', sa.String(20), nullable=False),
        sa.Column('severity', alarm_severity, nullable=False),
        sa.Column('message', sa.String(500), nullable=False),
        sa.Column('status', alarm_status, nullable=False),
        sa.Column('raised_at', sa.DateTime(), nullable=False),
        sa.Column('acknowledged_at', sa.DateTime(), nullable=True),
        sa.Column('acknowledged_by', sa.String(100), nullable=True),
        sa.Column('resolved_at', sa.DateTime(), nullable=True),
        sa.Column('resolution', sa.String(500), nullable=True),
    )
    op.create_index('ix_alarms_status_severity', 'alarms', ['status', 'severity'])

    # --- maintenance_events ---
    op.create_table(
        'maintenance_events',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('grid_node_id', sa.Integer(), sa.ForeignKey('grid_nodes.id', ondelete='CASCADE'), nullable=False),
        sa.Column('event_type', maintenance_type, nullable=False),
        sa.Column('description', sa.String(500), nullable=True),
        sa.Column('status', maintenance_status, nullable=False),
        sa.Column('scheduled_date', sa.DateTime(), nullable=False),
        sa.Column('started_at', sa.DateTime(), nullable=True),
        sa.Column('completed_at', sa.DateTime(), nullable=True),
        sa.Column('performed_by', sa.String(100), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
    )


def downgrade() -> None:
    op.drop_table('maintenance_events')
    op.drop_index('ix_alarms_status_severity', table_name='alarms')
    op.drop_table('alarms')
    op.drop_index('ix_sensor_readings_node_ts', table_name='sensor_readings')
    op.drop_table('sensor_readings')
    op.drop_table('grid_nodes')
    bind = op.get_bind()
    for enum_type in (
        maintenance_status, maintenance_type, alarm_status,
        alarm_severity, node_status, node_type,
    ):
        enum_type.drop(bind, checkfirst=True)
