"""esquema inicial de vacaciones y permisos

Revision ID: 0001_vacaciones_schema
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '0001_vacaciones_schema'
down_revision = None
branch_labels = None
depends_on = None


def _auditoria():
    return [
        sa.Column('fecha_registro', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('usuario_registro', sa.String(50), nullable=True),
        sa.Column('fecha_modificacion', sa.DateTime(), nullable=True),
        sa.Column('usuario_modificacion', sa.String(50), nullable=True),
    ]


def upgrade():
    op.create_table(
        'roles',
        sa.Column('id_rol', sa.Integer(), primary_key=True),
        sa.Column('nombre_rol', sa.String(100), nullable=False, unique=True),
        sa.Column('descripcion', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_roles_id_rol', 'roles', ['id_rol'])

    op.create_table(
        'usuarios',
        sa.Column('id_usuario', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('login_username', sa.String(50), nullable=False, unique=True),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('codigo_trabajador', sa.String(20), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=True, server_default=sa.true()),
        sa.Column('ultimo_acceso', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_usuarios_codigo_trabajador', 'usuarios', ['codigo_trabajador'])

    op.create_table(
        'usuario_rol',
        sa.Column('id_usuario', sa.Integer(), sa.ForeignKey('usuarios.id_usuario'), primary_key=True),
        sa.Column('id_rol', sa.Integer(), sa.ForeignKey('roles.id_rol'), primary_key=True),
    )

    op.create_table(
        'config_flujo',
        sa.Column('id_config', sa.Integer(), primary_key=True),
        sa.Column('tipo_solicitud', sa.String(1), nullable=False),
        sa.Column('codigo_permiso', sa.String(20), nullable=True),
        sa.Column('codigo_area', sa.String(20), nullable=True),
        sa.Column('codigo_seccion', sa.String(20), nullable=True),
        sa.Column('codigo_cargo', sa.String(20), nullable=True),
        sa.Column('dias_desde', sa.Numeric(6, 1), nullable=True),
        sa.Column('dias_hasta', sa.Numeric(6, 1), nullable=True),
        sa.Column('niveles_requeridos', sa.Integer(), nullable=False),
        sa.Column('orden', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('activo', sa.String(1), nullable=False, server_default='S'),
        sa.Column('fecha_desde', sa.Date(), nullable=False),
        sa.Column('fecha_hasta', sa.Date(), nullable=True),
        sa.Column('descripcion', sa.Text(), nullable=True),
        *_auditoria(),
        sa.CheckConstraint('niveles_requeridos >= 1', name='ck_config_flujo_niveles'),
    )
    op.create_index('ix_config_flujo_id_config', 'config_flujo', ['id_config'])
    op.create_index('ix_config_flujo_tipo_activo', 'config_flujo', ['tipo_solicitud', 'activo'])

    op.create_table(
        'jerarquia_aprobacion',
        sa.Column('id_jerarquia', sa.Integer(), primary_key=True),
        sa.Column('codigo_area', sa.String(20), nullable=True),
        sa.Column('codigo_seccion', sa.String(20), nullable=True),
        sa.Column('codigo_cargo', sa.String(20), nullable=True),
        sa.Column('codigo_trabajador_aprobador', sa.String(20), nullable=False),
        sa.Column('tipo_relacion', sa.String(1), nullable=False),
        sa.Column('nivel_jerarquico', sa.Integer(), nullable=False),
        sa.Column('activo', sa.String(1), nullable=False, server_default='S'),
        sa.Column('fecha_desde', sa.Date(), nullable=False),
        sa.Column('fecha_hasta', sa.Date(), nullable=True),
        sa.Column('descripcion', sa.Text(), nullable=True),
        *_auditoria(),
        sa.CheckConstraint('nivel_jerarquico >= 1', name='ck_jerarquia_nivel'),
    )
    op.create_index('ix_jerarquia_aprobacion_id_jerarquia', 'jerarquia_aprobacion', ['id_jerarquia'])
    op.create_index(
        'ix_jerarquia_aprobacion_codigo_trabajador_aprobador',
        'jerarquia_aprobacion', ['codigo_trabajador_aprobador']
    )
    op.create_index('ix_jerarquia_nivel_activo', 'jerarquia_aprobacion', ['nivel_jerarquico', 'activo'])

    op.create_table(
        'sustitutos',
        sa.Column('id_sustituto', sa.Integer(), primary_key=True),
        sa.Column('codigo_trabajador_titular', sa.String(20), nullable=False),
        sa.Column('codigo_trabajador_sustituto', sa.String(20), nullable=False),
        sa.Column('fecha_desde', sa.Date(), nullable=False),
        sa.Column('fecha_hasta', sa.Date(), nullable=False),
        sa.Column('motivo', sa.String(255), nullable=True),
        sa.Column('observacion', sa.Text(), nullable=True),
        sa.Column('activo', sa.String(1), nullable=False, server_default='S'),
        *_auditoria(),
        sa.CheckConstraint(
            'codigo_trabajador_titular <> codigo_trabajador_sustituto', name='ck_sustituto_distinto'
        ),
        sa.CheckConstraint('fecha_hasta >= fecha_desde', name='ck_sustituto_fechas'),
    )
    op.create_index('ix_sustitutos_id_sustituto', 'sustitutos', ['id_sustituto'])
    op.create_index('ix_sustitutos_codigo_trabajador_titular', 'sustitutos', ['codigo_trabajador_titular'])

    op.create_table(
        'solicitudes',
        sa.Column('id_solicitud', sa.Integer(), primary_key=True),
        sa.Column('tipo_solicitud', sa.String(1), nullable=False),
        sa.Column('codigo_permiso', sa.String(20), nullable=True),
        sa.Column('codigo_trabajador', sa.String(20), nullable=False),
        sa.Column('fecha_inicio', sa.Date(), nullable=False),
        sa.Column('fecha_fin', sa.Date(), nullable=False),
        sa.Column('dias_solicitados', sa.Numeric(6, 1), nullable=False),
        sa.Column('observacion', sa.Text(), nullable=True),
        sa.Column('motivo', sa.Text(), nullable=True),
        sa.Column('estado', sa.String(1), nullable=False, server_default='P'),
        sa.Column('codigo_area', sa.String(20), nullable=True),
        sa.Column('codigo_seccion', sa.String(20), nullable=True),
        sa.Column('codigo_cargo', sa.String(20), nullable=True),
        sa.Column('id_config', sa.Integer(), sa.ForeignKey('config_flujo.id_config'), nullable=True),
        sa.Column('fecha_registro', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('usuario_registro', sa.String(50), nullable=True),
        sa.Column('fecha_modificacion', sa.DateTime(), nullable=True),
        sa.Column('usuario_modificacion', sa.String(50), nullable=True),
        sa.Column('fecha_anulacion', sa.DateTime(), nullable=True),
        sa.Column('usuario_anulacion', sa.String(50), nullable=True),
        sa.Column('motivo_anulacion', sa.Text(), nullable=True),
        sa.Column('version', sa.Integer(), nullable=False, server_default='1'),
        sa.CheckConstraint('fecha_fin >= fecha_inicio', name='ck_solicitud_fechas'),
    )
    op.create_index('ix_solicitudes_id_solicitud', 'solicitudes', ['id_solicitud'])
    op.create_index('ix_solicitudes_codigo_trabajador', 'solicitudes', ['codigo_trabajador'])
    op.create_index('ix_solicitudes_estado', 'solicitudes', ['estado'])

    op.create_table(
        'aprobaciones',
        sa.Column('id_aprobacion', sa.Integer(), primary_key=True),
        sa.Column('id_solicitud', sa.Integer(), sa.ForeignKey('solicitudes.id_solicitud'), nullable=False),
        sa.Column('nivel', sa.Integer(), nullable=False),
        sa.Column('codigo_trabajador_aprueba', sa.String(20), nullable=False),
        sa.Column('codigo_trabajador_titular', sa.String(20), nullable=True),
        sa.Column('estado', sa.String(1), nullable=False, server_default='P'),
        sa.Column('observacion', sa.Text(), nullable=True),
        sa.Column('fecha', sa.DateTime(), nullable=True),
        sa.Column('usuario', sa.String(50), nullable=True),
        sa.Column('ip_dispositivo', sa.String(45), nullable=True),
        sa.UniqueConstraint('id_solicitud', 'nivel', name='uq_aprobacion_solicitud_nivel'),
    )
    op.create_index('ix_aprobaciones_id_aprobacion', 'aprobaciones', ['id_aprobacion'])
    op.create_index('ix_aprobaciones_id_solicitud', 'aprobaciones', ['id_solicitud'])
    op.create_index('ix_aprobaciones_codigo_trabajador_aprueba', 'aprobaciones', ['codigo_trabajador_aprueba'])


def downgrade():
    op.drop_table('aprobaciones')
    op.drop_table('solicitudes')
    op.drop_table('sustitutos')
    op.drop_table('jerarquia_aprobacion')
    op.drop_table('config_flujo')
    op.drop_table('usuario_rol')
    op.drop_table('usuarios')
    op.drop_table('roles')
