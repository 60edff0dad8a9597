# tests/test_stores.py

from datetime import date
from decimal import Decimal

import pytest

from app.core.exceptions import ResourceNotFoundException, ValidationException
from app.schemas.flujo import (
    ConfigFlujoCreate,
    ConfigFlujoUpdate,
    JerarquiaCreate,
    JerarquiaUpdate,
    SustitutoCreate,
    SustitutoUpdate
)
from app.services.config_flujo import ConfigFlujoService
from app.services.jerarquia import JerarquiaService
from app.services.sustituto import SustitutoService


class TestConfigFlujo:
    def test_create_normalizes_blank_codes(self, db):
        service = ConfigFlujoService(db)
        config = service.create_configuracion(
            ConfigFlujoCreate(
                tipo_solicitud="V", codigo_area=" ", codigo_seccion="", niveles_requeridos=2,
                fecha_desde=date(2024, 1, 1)
            ),
            "admin"
        )
        assert config.id_config is not None
        assert config.codigo_area is None
        assert config.codigo_seccion is None
        assert config.usuario_registro == "admin"
        assert config.activo == "S"

    def test_invalid_days_range(self, db):
        with pytest.raises(ValidationException):
            ConfigFlujoService(db).create_configuracion(
                ConfigFlujoCreate(tipo_solicitud="V", dias_desde=Decimal("10"), dias_hasta=Decimal("5"),
                                  niveles_requeridos=1),
                "admin"
            )

    def test_invalid_validity_window(self, db):
        with pytest.raises(ValidationException):
            ConfigFlujoService(db).create_configuracion(
                ConfigFlujoCreate(tipo_solicitud="V", niveles_requeridos=1,
                                  fecha_desde=date(2024, 6, 1), fecha_hasta=date(2024, 5, 1)),
                "admin"
            )

    def test_permission_code_only_for_permission_rules(self, db):
        with pytest.raises(ValidationException):
            ConfigFlujoService(db).create_configuracion(
                ConfigFlujoCreate(tipo_solicitud="V", codigo_permiso="PM", niveles_requeridos=1),
                "admin"
            )

    def test_update_validates_merged_values(self, db):
        service = ConfigFlujoService(db)
        config = service.create_configuracion(
            ConfigFlujoCreate(tipo_solicitud="V", dias_desde=Decimal("1"), dias_hasta=Decimal("5"),
                              niveles_requeridos=1),
            "admin"
        )
        with pytest.raises(ValidationException):
            service.update_configuracion(config.id_config, ConfigFlujoUpdate(dias_desde=Decimal("8")), "admin")

        actualizada = service.update_configuracion(
            config.id_config, ConfigFlujoUpdate(niveles_requeridos=3, orden=2), "rrhh"
        )
        assert actualizada.niveles_requeridos == 3
        assert actualizada.orden == 2
        assert actualizada.usuario_modificacion == "rrhh"

    def test_delete_is_soft(self, db):
        service = ConfigFlujoService(db)
        config = service.create_configuracion(ConfigFlujoCreate(tipo_solicitud="V", niveles_requeridos=1), "admin")

        service.delete_configuracion(config.id_config, "admin")

        assert service.get_configuracion(config.id_config).activo == "N"
        assert service.reglas_activas("V") == []

    def test_missing_rule_not_found(self, db):
        with pytest.raises(ResourceNotFoundException):
            ConfigFlujoService(db).get_configuracion(999)

    def test_list_enriched_with_catalog_names(self, db, catalog):
        service = ConfigFlujoService(db, catalog)
        service.create_configuracion(
            ConfigFlujoCreate(tipo_solicitud="P", codigo_permiso="PM", codigo_area="05", niveles_requeridos=1),
            "admin"
        )
        service.create_configuracion(ConfigFlujoCreate(tipo_solicitud="V", niveles_requeridos=1), "admin")

        pagina = service.get_configuraciones({"tipo_solicitud": "P"}, page=1, limit=10)

        assert pagina["total"] == 1
        assert pagina["total_pages"] == 1
        item = pagina["configuraciones"][0]
        assert item.area_nombre == "Finanzas"
        assert item.permiso_nombre == "Permiso médico"


class TestJerarquia:
    def test_create_and_list(self, db, catalog):
        service = JerarquiaService(db, catalog)
        service.create_jerarquia(
            JerarquiaCreate(codigo_area="05", codigo_trabajador_aprobador="100", tipo_relacion="J",
                            nivel_jerarquico=1, fecha_desde=date(2024, 1, 1)),
            "admin"
        )
        pagina = service.get_jerarquias({"codigo_area": "05"})

        assert pagina["total"] == 1
        item = pagina["jerarquias"][0]
        assert item.aprobador_nombre == "Ana Jefa"
        assert item.area_nombre == "Finanzas"

    def test_window_validated_on_update(self, db):
        service = JerarquiaService(db)
        row = service.create_jerarquia(
            JerarquiaCreate(codigo_trabajador_aprobador="100", tipo_relacion="J", nivel_jerarquico=1,
                            fecha_desde=date(2024, 1, 1)),
            "admin"
        )
        with pytest.raises(ValidationException):
            service.update_jerarquia(row.id_jerarquia, JerarquiaUpdate(fecha_hasta=date(2023, 12, 31)), "admin")

    def test_soft_delete_removes_from_active_snapshot(self, db):
        service = JerarquiaService(db)
        row = service.create_jerarquia(
            JerarquiaCreate(codigo_trabajador_aprobador="100", tipo_relacion="G", nivel_jerarquico=2),
            "admin"
        )
        assert len(service.jerarquias_activas()) == 1

        service.delete_jerarquia(row.id_jerarquia, "admin")

        assert service.jerarquias_activas() == []
        assert service.get_jerarquia(row.id_jerarquia).activo == "N"


class TestSustituto:
    def crear(self, service, titular="100", suplente="200", desde=date(2024, 5, 1), hasta=date(2024, 6, 15), **kw):
        return service.create_sustituto(
            SustitutoCreate(
                codigo_trabajador_titular=titular,
                codigo_trabajador_sustituto=suplente,
                fecha_desde=desde,
                fecha_hasta=hasta,
                motivo="Vacaciones del titular",
                **kw
            ),
            "admin"
        )

    def test_titular_and_substitute_must_differ(self, db):
        with pytest.raises(ValidationException):
            self.crear(SustitutoService(db), suplente="100")

    def test_dates_must_be_ordered(self, db):
        with pytest.raises(ValidationException):
            self.crear(SustitutoService(db), desde=date(2024, 6, 15), hasta=date(2024, 5, 1))

    def test_overlapping_active_rows_rejected(self, db):
        service = SustitutoService(db)
        primero = self.crear(service)

        with pytest.raises(ValidationException) as exc:
            self.crear(service, suplente="210", desde=date(2024, 6, 15), hasta=date(2024, 6, 30))
        assert exc.value.details["id_sustituto_existente"] == primero.id_sustituto

        contiguo = self.crear(service, suplente="210", desde=date(2024, 6, 16), hasta=date(2024, 6, 30))
        assert contiguo.id_sustituto != primero.id_sustituto

    def test_inactive_row_may_overlap(self, db):
        service = SustitutoService(db)
        self.crear(service)
        inactivo = self.crear(service, suplente="210", activo="N")
        assert inactivo.activo == "N"

    def test_other_titular_may_overlap(self, db):
        service = SustitutoService(db)
        self.crear(service)
        assert self.crear(service, titular="150", suplente="200").id_sustituto is not None

    def test_update_does_not_conflict_with_itself(self, db):
        service = SustitutoService(db)
        row = self.crear(service)

        actualizado = service.update_sustituto(
            row.id_sustituto, SustitutoUpdate(fecha_hasta=date(2024, 6, 20)), "rrhh"
        )
        assert actualizado.fecha_hasta == date(2024, 6, 20)

    def test_reactivation_checks_overlap(self, db):
        service = SustitutoService(db)
        self.crear(service)
        inactivo = self.crear(service, suplente="210", activo="N")

        with pytest.raises(ValidationException):
            service.update_sustituto(inactivo.id_sustituto, SustitutoUpdate(activo="S"), "admin")

    def test_filters_and_names(self, db, catalog):
        service = SustitutoService(db, catalog)
        self.crear(service)
        self.crear(service, titular="150", suplente="300", desde=date(2024, 8, 1), hasta=date(2024, 8, 31))

        vigentes = service.get_sustitutos({"vigente_en": date(2024, 6, 1)})
        assert vigentes["total"] == 1
        item = vigentes["sustitutos"][0]
        assert item.titular_nombre == "Ana Jefa"
        assert item.sustituto_nombre == "Bruno Suplente"

        assert service.get_sustitutos({"codigo_trabajador_titular": "150"})["total"] == 1

    def test_delete_deactivates(self, db):
        service = SustitutoService(db)
        row = self.crear(service)
        service.delete_sustituto(row.id_sustituto, "admin")
        assert service.sustitutos_activos() == []
