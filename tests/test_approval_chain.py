# tests/test_approval_chain.py

from datetime import date, datetime

import pytest

from app.core.exceptions import IncompleteApprovalChainException, ValidationException
from app.models.flujo import Jerarquia, Sustituto
from app.services.approval_chain import ApprovalChainResolver, resolve_approval_chain
from app.services.matching import OrgScope

FECHA = date(2024, 6, 1)
FINANZAS = OrgScope(codigo_area="05", codigo_seccion="0501", codigo_cargo="AN")


def jerarquia(id_jerarquia, aprobador, nivel, **kwargs):
    datos = dict(
        id_jerarquia=id_jerarquia,
        codigo_trabajador_aprobador=aprobador,
        nivel_jerarquico=nivel,
        tipo_relacion="J",
        activo="S",
        fecha_desde=date(2024, 1, 1),
        fecha_hasta=None,
        codigo_area=None,
        codigo_seccion=None,
        codigo_cargo=None
    )
    datos.update(kwargs)
    return Jerarquia(**datos)


def sustituto(id_sustituto, titular, suplente, desde, hasta, registro=datetime(2024, 5, 1), **kwargs):
    datos = dict(
        id_sustituto=id_sustituto,
        codigo_trabajador_titular=titular,
        codigo_trabajador_sustituto=suplente,
        fecha_desde=desde,
        fecha_hasta=hasta,
        activo="S",
        fecha_registro=registro
    )
    datos.update(kwargs)
    return Sustituto(**datos)


class TestCadena:
    def test_one_approver_per_level_in_order(self):
        jerarquias = [
            jerarquia(2, "150", 2, codigo_area="05", tipo_relacion="G"),
            jerarquia(1, "100", 1, codigo_area="05"),
        ]
        cadena = resolve_approval_chain(2, FINANZAS, FECHA, jerarquias, [])

        assert [a.nivel for a in cadena] == [1, 2]
        assert [a.codigo_trabajador_aprueba for a in cadena] == ["100", "150"]
        assert not any(a.es_sustitucion for a in cadena)

    def test_most_specific_row_per_level(self):
        jerarquias = [
            jerarquia(1, "500", 1),
            jerarquia(2, "100", 1, codigo_area="05"),
            jerarquia(3, "110", 1, codigo_area="05", codigo_seccion="0501"),
        ]
        cadena = resolve_approval_chain(1, FINANZAS, FECHA, jerarquias, [])
        assert cadena[0].codigo_trabajador_aprueba == "110"
        assert cadena[0].id_jerarquia == 3

    def test_specificity_tie_broken_by_id(self):
        jerarquias = [jerarquia(8, "200", 1, codigo_area="05"), jerarquia(4, "100", 1, codigo_area="05")]
        cadena = resolve_approval_chain(1, FINANZAS, FECHA, jerarquias, [])
        assert cadena[0].id_jerarquia == 4

    def test_inactive_and_expired_rows_ignored(self):
        jerarquias = [
            jerarquia(1, "100", 1, codigo_area="05", activo="N"),
            jerarquia(2, "110", 1, codigo_area="05", fecha_hasta=date(2024, 5, 31)),
            jerarquia(3, "500", 1),
        ]
        cadena = resolve_approval_chain(1, FINANZAS, FECHA, jerarquias, [])
        assert cadena[0].codigo_trabajador_aprueba == "500"

    def test_missing_levels_are_all_reported(self):
        jerarquias = [jerarquia(1, "100", 1, codigo_area="05")]
        with pytest.raises(IncompleteApprovalChainException) as exc:
            resolve_approval_chain(3, FINANZAS, FECHA, jerarquias, [])
        assert exc.value.niveles_faltantes == [2, 3]
        assert exc.value.details["niveles_requeridos"] == 3

    def test_row_for_other_area_does_not_fill_level(self):
        jerarquias = [
            jerarquia(1, "100", 1, codigo_area="05"),
            jerarquia(2, "600", 2, codigo_area="06"),
        ]
        with pytest.raises(IncompleteApprovalChainException) as exc:
            resolve_approval_chain(2, FINANZAS, FECHA, jerarquias, [])
        assert exc.value.niveles_faltantes == [2]

    def test_niveles_must_be_positive(self):
        with pytest.raises(ValidationException):
            resolve_approval_chain(0, FINANZAS, FECHA, [], [])


class TestSustituciones:
    def test_substitute_replaces_holder_inside_window(self):
        jerarquias = [jerarquia(1, "100", 1, codigo_area="05")]
        sustitutos = [sustituto(1, "100", "200", date(2024, 5, 20), date(2024, 6, 10))]

        cadena = resolve_approval_chain(1, FINANZAS, FECHA, jerarquias, sustitutos)

        assert cadena[0].codigo_trabajador_aprueba == "200"
        assert cadena[0].codigo_trabajador_titular == "100"
        assert cadena[0].id_sustituto == 1
        assert cadena[0].es_sustitucion

    def test_window_bounds_are_inclusive(self):
        jerarquias = [jerarquia(1, "100", 1)]
        sustitutos = [sustituto(1, "100", "200", date(2024, 5, 20), date(2024, 6, 10))]

        for fecha, esperado in (
            (date(2024, 5, 19), "100"),
            (date(2024, 5, 20), "200"),
            (date(2024, 6, 10), "200"),
            (date(2024, 6, 11), "100"),
        ):
            cadena = resolve_approval_chain(1, FINANZAS, fecha, jerarquias, sustitutos)
            assert cadena[0].codigo_trabajador_aprueba == esperado, fecha

    def test_inactive_substitution_ignored(self):
        jerarquias = [jerarquia(1, "100", 1)]
        sustitutos = [sustituto(1, "100", "200", date(2024, 5, 1), date(2024, 7, 1), activo="N")]
        cadena = resolve_approval_chain(1, FINANZAS, FECHA, jerarquias, sustitutos)
        assert cadena[0].codigo_trabajador_aprueba == "100"

    def test_substitution_is_not_chained(self):
        jerarquias = [jerarquia(1, "100", 1)]
        sustitutos = [
            sustituto(1, "100", "200", date(2024, 5, 1), date(2024, 7, 1)),
            sustituto(2, "200", "300", date(2024, 5, 1), date(2024, 7, 1)),
        ]
        cadena = resolve_approval_chain(1, FINANZAS, FECHA, jerarquias, sustitutos)
        assert cadena[0].codigo_trabajador_aprueba == "200"

    def test_most_recent_registration_wins(self):
        resolver = ApprovalChainResolver([], [
            sustituto(5, "100", "200", date(2024, 5, 1), date(2024, 7, 1), registro=datetime(2024, 4, 1)),
            sustituto(3, "100", "210", date(2024, 5, 15), date(2024, 6, 15), registro=datetime(2024, 5, 10)),
        ])
        assert resolver.sustituto_vigente("100", FECHA).id_sustituto == 3

    def test_same_registration_time_falls_back_to_id(self):
        registro = datetime(2024, 5, 10, 8, 0)
        resolver = ApprovalChainResolver([], [
            sustituto(3, "100", "210", date(2024, 5, 1), date(2024, 7, 1), registro=registro),
            sustituto(6, "100", "220", date(2024, 5, 1), date(2024, 7, 1), registro=registro),
        ])
        assert resolver.sustituto_vigente("100", FECHA).codigo_trabajador_sustituto == "220"

    def test_substitution_applies_per_level(self):
        jerarquias = [jerarquia(1, "100", 1), jerarquia(2, "150", 2)]
        sustitutos = [sustituto(1, "150", "200", date(2024, 5, 1), date(2024, 7, 1))]

        cadena = resolve_approval_chain(2, FINANZAS, FECHA, jerarquias, sustitutos)

        assert [a.codigo_trabajador_aprueba for a in cadena] == ["100", "200"]
        assert [a.codigo_trabajador_titular for a in cadena] == ["100", "150"]
