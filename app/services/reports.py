# app/services/reports.py

from typing import List, Dict, Any, Optional
from sqlalchemy.orm import Session
from sqlalchemy import func
from datetime import date
from decimal import Decimal
import io
import logging
import xlsxwriter

from app.core.config import settings
from app.models.catalogo import Trabajador
from app.models.enums import EstadoSolicitud, TipoSolicitud
from app.models.solicitud import Solicitud
from app.services.catalogo import CatalogService
from app.services.solicitud import SolicitudService
from app.utils.pagination import paginar

logger = logging.getLogger(__name__)

NOMBRES_ESTADO = {
    EstadoSolicitud.PENDIENTE.value: "Pendiente",
    EstadoSolicitud.APROBADO.value: "Aprobado",
    EstadoSolicitud.RECHAZADO.value: "Rechazado",
    EstadoSolicitud.ANULADO.value: "Anulado",
}

NOMBRES_TIPO = {
    TipoSolicitud.VACACIONES.value: "Vacaciones",
    TipoSolicitud.PERMISO.value: "Permiso",
}


class ReportService:
    def __init__(self, db: Session, catalog: Optional[CatalogService] = None):
        self.db = db
        self.catalog = catalog

    def _query_periodo(self, fecha_desde: Optional[date], fecha_hasta: Optional[date]):
        query = self.db.query(Solicitud)
        if fecha_desde:
            query = query.filter(Solicitud.fecha_inicio >= fecha_desde)
        if fecha_hasta:
            query = query.filter(Solicitud.fecha_inicio <= fecha_hasta)
        return query

    def estadisticas(self, fecha_desde: Optional[date] = None, fecha_hasta: Optional[date] = None) -> Dict[str, Any]:
        """Totales del periodo. Las solicitudes anuladas no suman días."""
        base = self._query_periodo(fecha_desde, fecha_hasta)

        por_estado = {codigo: 0 for codigo in NOMBRES_ESTADO}
        for estado, total in base.with_entities(Solicitud.estado, func.count(Solicitud.id_solicitud)).group_by(Solicitud.estado):
            por_estado[estado] = total

        por_tipo = {codigo: 0 for codigo in NOMBRES_TIPO}
        for tipo, total in base.with_entities(Solicitud.tipo_solicitud, func.count(Solicitud.id_solicitud)).group_by(Solicitud.tipo_solicitud):
            por_tipo[tipo] = total

        dias_solicitados = base.filter(
            Solicitud.estado != EstadoSolicitud.ANULADO.value
        ).with_entities(func.coalesce(func.sum(Solicitud.dias_solicitados), 0)).scalar()
        dias_aprobados = base.filter(
            Solicitud.estado == EstadoSolicitud.APROBADO.value
        ).with_entities(func.coalesce(func.sum(Solicitud.dias_solicitados), 0)).scalar()

        permisos = base.filter(
            Solicitud.tipo_solicitud == TipoSolicitud.PERMISO.value
        ).with_entities(
            Solicitud.codigo_permiso, func.count(Solicitud.id_solicitud)
        ).group_by(Solicitud.codigo_permiso).all()

        areas = base.with_entities(
            Solicitud.codigo_area, func.count(Solicitud.id_solicitud)
        ).group_by(Solicitud.codigo_area).all()

        # Agrupación por mes en Python para no depender de funciones de fecha del motor
        por_mes: Dict[str, int] = {}
        for (fecha_inicio,) in base.with_entities(Solicitud.fecha_inicio):
            clave = fecha_inicio.strftime("%Y-%m")
            por_mes[clave] = por_mes.get(clave, 0) + 1

        nombres_permisos = nombres_areas = {}
        if self.catalog:
            nombres_permisos = self.catalog.nombres_permisos(c for c, _ in permisos)
            nombres_areas = self.catalog.nombres_areas(c for c, _ in areas)

        return {
            "fecha_desde": fecha_desde,
            "fecha_hasta": fecha_hasta,
            "total_solicitudes": sum(por_estado.values()),
            "solicitudes_pendientes": por_estado[EstadoSolicitud.PENDIENTE.value],
            "solicitudes_aprobadas": por_estado[EstadoSolicitud.APROBADO.value],
            "solicitudes_rechazadas": por_estado[EstadoSolicitud.RECHAZADO.value],
            "solicitudes_anuladas": por_estado[EstadoSolicitud.ANULADO.value],
            "total_vacaciones": por_tipo[TipoSolicitud.VACACIONES.value],
            "total_permisos": por_tipo[TipoSolicitud.PERMISO.value],
            "dias_solicitados_totales": Decimal(str(dias_solicitados)),
            "dias_aprobados_totales": Decimal(str(dias_aprobados)),
            "permisos_por_tipo": sorted(
                [
                    {"clave": c or "", "descripcion": nombres_permisos.get(c), "total": t}
                    for c, t in permisos
                ],
                key=lambda x: (-x["total"], x["clave"])
            ),
            "solicitudes_por_area": sorted(
                [
                    {"clave": c or "", "descripcion": nombres_areas.get(c), "total": t}
                    for c, t in areas
                ],
                key=lambda x: (-x["total"], x["clave"])
            ),
            "solicitudes_por_mes": [
                {"clave": mes, "total": por_mes[mes]} for mes in sorted(por_mes)
            ],
        }

    def saldos(
        self,
        codigo_area: Optional[str] = None,
        codigo_seccion: Optional[str] = None,
        anio: Optional[int] = None,
        page: int = 1,
        limit: int = 10
    ) -> Dict[str, Any]:
        """
        Saldo de vacaciones por trabajador: días asignados según RRHH menos
        vacaciones aprobadas (usados) y pendientes. Con ``anio`` solo cuentan
        las vacaciones que inician en ese año.
        """
        query = self.catalog.db_rrhh.query(Trabajador).filter(Trabajador.activo.is_(True))
        if codigo_area:
            query = query.filter(Trabajador.codigo_area == codigo_area)
        if codigo_seccion:
            query = query.filter(Trabajador.codigo_seccion == codigo_seccion)
        trabajadores, total, page, limit, pages = paginar(query.order_by(Trabajador.codigo), page, limit)

        usados = self._dias_por_trabajador(trabajadores, EstadoSolicitud.APROBADO.value, anio)
        pendientes = self._dias_por_trabajador(trabajadores, EstadoSolicitud.PENDIENTE.value, anio)

        saldos = []
        for trabajador in trabajadores:
            asignados = Decimal(
                trabajador.dias_vacaciones_anuales
                if trabajador.dias_vacaciones_anuales is not None
                else settings.DIAS_VACACIONES_DEFAULT
            )
            dias_usados = usados.get(trabajador.codigo, Decimal("0"))
            dias_pendientes = pendientes.get(trabajador.codigo, Decimal("0"))
            saldos.append({
                "codigo_trabajador": trabajador.codigo,
                "nombre_completo": trabajador.nombre_completo,
                "codigo_area": trabajador.codigo_area,
                "codigo_seccion": trabajador.codigo_seccion,
                "dias_asignados_totales": asignados,
                "dias_usados": dias_usados,
                "dias_pendientes": dias_pendientes,
                "saldo_disponible": asignados - dias_usados - dias_pendientes,
            })

        return {"saldos": saldos, "total": total, "page": page, "limit": limit, "total_pages": pages}

    def _dias_por_trabajador(self, trabajadores: List[Trabajador], estado: str, anio: Optional[int]) -> Dict[str, Decimal]:
        codigos = [t.codigo for t in trabajadores]
        if not codigos:
            return {}
        query = self.db.query(
            Solicitud.codigo_trabajador, func.sum(Solicitud.dias_solicitados)
        ).filter(
            Solicitud.codigo_trabajador.in_(codigos),
            Solicitud.tipo_solicitud == TipoSolicitud.VACACIONES.value,
            Solicitud.estado == estado
        )
        if anio:
            query = query.filter(
                Solicitud.fecha_inicio >= date(anio, 1, 1),
                Solicitud.fecha_inicio <= date(anio, 12, 31)
            )
        rows = query.group_by(Solicitud.codigo_trabajador).all()
        return {codigo: Decimal(str(dias or 0)) for codigo, dias in rows}

    def export_solicitudes(self, filters: Dict[str, Any]) -> io.BytesIO:
        """Exportar a Excel la lista filtrada de solicitudes"""
        solicitudes = SolicitudService(self.db, self.catalog).query_solicitudes(filters).all()
        logger.info("Exportando %d solicitudes a Excel", len(solicitudes))
        return self._generate_excel_report(solicitudes)

    def _generate_excel_report(self, solicitudes: List[Solicitud]) -> io.BytesIO:
        output = io.BytesIO()
        workbook = xlsxwriter.Workbook(output, {'in_memory': True})
        worksheet = workbook.add_worksheet('Solicitudes')

        header_format = workbook.add_format({
            'bold': True,
            'bg_color': '#D3D3D3',
            'font_color': 'black',
            'border': 1,
            'text_wrap': True,
            'valign': 'top'
        })

        date_format = workbook.add_format({
            'num_format': 'dd/mm/yyyy',
            'border': 1
        })

        number_format = workbook.add_format({
            'num_format': '0.0',
            'border': 1
        })

        text_format = workbook.add_format({
            'border': 1,
            'text_wrap': True,
            'valign': 'top'
        })

        nombres_trabajadores = nombres_areas = nombres_permisos = {}
        if self.catalog:
            codigos = [s.codigo_trabajador for s in solicitudes]
            codigos += [a.codigo_trabajador_aprueba for s in solicitudes for a in s.aprobaciones]
            nombres_trabajadores = self.catalog.nombres_trabajadores(codigos)
            nombres_areas = self.catalog.nombres_areas(s.codigo_area for s in solicitudes)
            nombres_permisos = self.catalog.nombres_permisos(s.codigo_permiso for s in solicitudes)

        headers = [
            'N° Solicitud',
            'Tipo',
            'Permiso',
            'Código Trabajador',
            'Trabajador',
            'Área',
            'Fecha Inicio',
            'Fecha Fin',
            'Días',
            'Estado',
            'Niveles',
            'Aprobadores',
            'Fecha Registro',
            'Motivo Anulación'
        ]
        for col, header in enumerate(headers):
            worksheet.write(0, col, header, header_format)

        for row, solicitud in enumerate(solicitudes, 1):
            aprobadores = "; ".join(
                f"N{a.nivel}: {nombres_trabajadores.get(a.codigo_trabajador_aprueba) or a.codigo_trabajador_aprueba}"
                f" ({NOMBRES_ESTADO.get(a.estado, a.estado)})"
                for a in solicitud.aprobaciones
            )
            worksheet.write(row, 0, solicitud.id_solicitud, text_format)
            worksheet.write(row, 1, NOMBRES_TIPO.get(solicitud.tipo_solicitud, solicitud.tipo_solicitud), text_format)
            worksheet.write(
                row, 2,
                nombres_permisos.get(solicitud.codigo_permiso) or solicitud.codigo_permiso or '',
                text_format
            )
            worksheet.write(row, 3, solicitud.codigo_trabajador, text_format)
            worksheet.write(row, 4, nombres_trabajadores.get(solicitud.codigo_trabajador, ''), text_format)
            worksheet.write(
                row, 5,
                nombres_areas.get(solicitud.codigo_area) or solicitud.codigo_area or '',
                text_format
            )
            worksheet.write_datetime(row, 6, solicitud.fecha_inicio, date_format)
            worksheet.write_datetime(row, 7, solicitud.fecha_fin, date_format)
            worksheet.write_number(row, 8, float(solicitud.dias_solicitados), number_format)
            worksheet.write(row, 9, NOMBRES_ESTADO.get(solicitud.estado, solicitud.estado), text_format)
            worksheet.write_number(row, 10, solicitud.niveles_requeridos, text_format)
            worksheet.write(row, 11, aprobadores, text_format)
            worksheet.write_datetime(row, 12, solicitud.fecha_registro, date_format)
            worksheet.write(row, 13, solicitud.motivo_anulacion or '', text_format)

        worksheet.set_column('A:A', 12)  # N° solicitud
        worksheet.set_column('B:C', 18)  # Tipo y permiso
        worksheet.set_column('D:D', 15)
        worksheet.set_column('E:F', 30)  # Trabajador y área
        worksheet.set_column('G:H', 14)  # Fechas
        worksheet.set_column('I:K', 10)
        worksheet.set_column('L:L', 50)  # Aprobadores
        worksheet.set_column('M:M', 14)
        worksheet.set_column('N:N', 35)

        workbook.close()
        output.seek(0)
        return output
