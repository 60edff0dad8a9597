# tests/test_api.py

from datetime import date, timedelta
from decimal import Decimal

import pytest

from app.core.security import get_password_hash
from app.models import Rol, Solicitud, Usuario
from tests.conftest import auth_headers, crear_sustituto

API = "/api/v1"

SOLICITUD_JULIO = {
    "tipo_solicitud": "V",
    "fecha_inicio": "2024-07-01",
    "fecha_fin": "2024-07-03",
    "dias_solicitados": "3",
    "observacion": "Viaje familiar"
}


@pytest.fixture
def escenario(client, usuarios, flujo_area_05):
    return client


def registrar(client, username="carla", **kwargs):
    payload = dict(SOLICITUD_JULIO, **kwargs)
    return client.post(f"{API}/vacaciones/solicitudes", json=payload, headers=auth_headers(username))


class TestAuth:
    @pytest.fixture
    def usuario_login(self, db, usuarios):
        user = Usuario(
            login_username="login.prueba",
            password_hash=get_password_hash("secreta123"),
            codigo_trabajador="300",
            roles=[db.query(Rol).filter(Rol.nombre_rol == "EMPLEADO").one()]
        )
        db.add(user)
        db.commit()
        return user

    def test_login_returns_token_and_profile(self, client, usuario_login):
        response = client.post(
            f"{API}/auth/login", data={"username": "login.prueba", "password": "secreta123"}
        )
        assert response.status_code == 200
        body = response.json()
        assert body["token_type"] == "bearer"
        assert body["access_token"]
        assert body["user"]["roles"] == ["EMPLEADO"]
        assert body["user"]["nombre_completo"] == "Carla Analista"

        me = client.get(f"{API}/auth/me", headers={"Authorization": f"Bearer {body['access_token']}"})
        assert me.status_code == 200
        assert me.json()["login_username"] == "login.prueba"

    def test_bad_password(self, client, usuario_login):
        response = client.post(f"{API}/auth/login", data={"username": "login.prueba", "password": "otra"})
        assert response.status_code == 401
        assert response.json()["type"] == "authentication_error"

    def test_superadmin_flag(self, client, usuarios):
        assert client.get(f"{API}/auth/me", headers=auth_headers("superadmin")).json()["es_superadmin"] is True
        assert client.get(f"{API}/auth/me", headers=auth_headers("carla")).json()["es_superadmin"] is False

    def test_inactive_user_rejected(self, client, usuarios):
        assert client.get(f"{API}/auth/me", headers=auth_headers("inactivo")).status_code == 401

    def test_missing_token(self, client):
        assert client.get(f"{API}/auth/me").status_code == 401


class TestRegistroSolicitud:
    def test_employee_submits_own_request(self, escenario):
        response = registrar(escenario)

        assert response.status_code == 201
        body = response.json()
        assert body["estado"] == "P"
        assert body["codigo_trabajador"] == "300"
        assert body["trabajador_nombre"] == "Carla Analista"
        assert Decimal(body["dias_solicitados"]) == Decimal("3")
        assert [(a["nivel"], a["codigo_trabajador_aprueba"]) for a in body["aprobaciones"]] == [
            (1, "100"), (2, "150")
        ]
        assert body["aprobaciones"][0]["aprobador_nombre"] == "Ana Jefa"

    def test_employee_scope_comes_from_rrhh(self, escenario):
        body = registrar(escenario, codigo_area="06", codigo_seccion="0601").json()
        assert body["codigo_area"] == "05"
        assert body["codigo_seccion"] == "0501"

    def test_employee_cannot_submit_for_other_worker(self, escenario):
        response = registrar(escenario, codigo_trabajador="301")
        assert response.status_code == 403
        assert response.json()["type"] == "permission_error"

    def test_manager_submits_for_worker_with_explicit_scope(self, escenario):
        response = registrar(escenario, username="rrhh", codigo_trabajador="301", codigo_area="05",
                             codigo_cargo="AN")
        assert response.status_code == 201
        body = response.json()
        assert body["codigo_trabajador"] == "301"
        assert body["usuario_registro"] == "rrhh"

    def test_user_without_worker_cannot_submit(self, escenario):
        assert registrar(escenario, username="admin").status_code == 403

    def test_unroutable_request_is_not_saved(self, escenario, db):
        response = registrar(
            escenario, username="admin", codigo_trabajador="900", tipo_solicitud="P", codigo_permiso="X9",
            fecha_fin="2024-07-01", dias_solicitados="1"
        )
        assert response.status_code == 422
        body = response.json()
        assert body["type"] == "no_matching_flow_configuration"
        assert body["details"]["codigo_area"] == "99"
        assert db.query(Solicitud).count() == 0

    def test_validation_error_shape(self, escenario):
        response = registrar(escenario, dias_solicitados="5")
        assert response.status_code == 422
        body = response.json()
        assert set(body) == {"error", "message", "details", "type"}
        assert body["type"] == "validation_error"

    def test_mis_solicitudes(self, escenario):
        registrar(escenario)
        response = escenario.get(f"{API}/vacaciones/solicitudes/mias", headers=auth_headers("carla"))
        assert response.status_code == 200
        assert response.json()["total"] == 1
        assert escenario.get(
            f"{API}/vacaciones/solicitudes/mias", headers=auth_headers("bruno")
        ).json()["total"] == 0


class TestDecisionApi:
    def decidir(self, client, id_solicitud, username, decision="A", **kwargs):
        return client.post(
            f"{API}/vacaciones/solicitudes/{id_solicitud}/decision",
            json=dict(decision=decision, **kwargs),
            headers=dict(auth_headers(username), **{"X-Forwarded-For": "192.168.1.20, 10.0.0.1"})
        )

    def test_full_approval(self, escenario):
        id_solicitud = registrar(escenario).json()["id_solicitud"]

        primero = self.decidir(escenario, id_solicitud, "ana", observacion="Conforme")
        assert primero.status_code == 200
        assert primero.json()["estado"] == "P"
        assert primero.json()["aprobaciones"][0]["ip_dispositivo"] == "192.168.1.20"

        final = self.decidir(escenario, id_solicitud, "gerardo")
        assert final.status_code == 200
        assert final.json()["estado"] == "A"

    def test_only_assigned_approver_may_decide(self, escenario):
        id_solicitud = registrar(escenario).json()["id_solicitud"]
        assert self.decidir(escenario, id_solicitud, "bruno").status_code == 403
        assert self.decidir(escenario, id_solicitud, "carla").status_code == 403

    def test_next_level_approver_must_wait(self, escenario):
        id_solicitud = registrar(escenario).json()["id_solicitud"]
        response = self.decidir(escenario, id_solicitud, "gerardo", nivel=2)
        assert response.status_code == 409
        assert response.json()["type"] == "invalid_transition"

    def test_manager_may_decide_for_any_level(self, escenario):
        id_solicitud = registrar(escenario).json()["id_solicitud"]
        response = self.decidir(escenario, id_solicitud, "rrhh", decision="R", observacion="Cierre")
        assert response.status_code == 200
        assert response.json()["estado"] == "R"
        assert response.json()["aprobaciones"][0]["usuario"] == "rrhh"

    def test_decision_on_closed_request(self, escenario):
        id_solicitud = registrar(escenario).json()["id_solicitud"]
        self.decidir(escenario, id_solicitud, "ana", decision="R")
        assert self.decidir(escenario, id_solicitud, "gerardo").status_code == 409

    def test_substitute_decides_in_place_of_holder(self, escenario, db):
        hoy = date.today()
        crear_sustituto(
            db,
            codigo_trabajador_titular="100",
            codigo_trabajador_sustituto="200",
            fecha_desde=hoy - timedelta(days=1),
            fecha_hasta=hoy + timedelta(days=10)
        )
        id_solicitud = registrar(escenario).json()["id_solicitud"]

        assert self.decidir(escenario, id_solicitud, "ana").status_code == 403
        response = self.decidir(escenario, id_solicitud, "bruno")
        assert response.status_code == 200
        assert response.json()["aprobaciones"][0]["codigo_trabajador_titular"] == "100"

    def test_invalid_decision_payload(self, escenario):
        id_solicitud = registrar(escenario).json()["id_solicitud"]
        assert self.decidir(escenario, id_solicitud, "ana", decision="X").status_code == 422

    def test_request_visibility(self, escenario):
        id_solicitud = registrar(escenario).json()["id_solicitud"]
        url = f"{API}/vacaciones/solicitudes/{id_solicitud}"
        assert escenario.get(url, headers=auth_headers("carla")).status_code == 200
        assert escenario.get(url, headers=auth_headers("ana")).status_code == 200
        assert escenario.get(url, headers=auth_headers("rrhh")).status_code == 200
        assert escenario.get(url, headers=auth_headers("bruno")).status_code == 403
        assert escenario.get(f"{API}/vacaciones/solicitudes/999", headers=auth_headers("rrhh")).status_code == 404


class TestBandejaApi:
    def test_pending_inbox(self, escenario):
        registrar(escenario)

        response = escenario.get(f"{API}/vacaciones/aprobaciones/pendientes", headers=auth_headers("ana"))
        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 1
        assert body["aprobaciones"][0]["trabajador_nombre"] == "Carla Analista"

        count = escenario.get(f"{API}/vacaciones/aprobaciones/pendientes/count", headers=auth_headers("gerardo"))
        assert count.json() == {"total": 0}

    def test_inbox_requires_worker(self, escenario):
        response = escenario.get(f"{API}/vacaciones/aprobaciones/pendientes", headers=auth_headers("admin"))
        assert response.status_code == 403


class TestAdministracion:
    def test_employee_has_no_admin_access(self, escenario):
        for url in ("/vacaciones/admin/solicitudes", "/vacaciones/admin/config-flujo", "/vacaciones/admin/saldos"):
            assert escenario.get(f"{API}{url}", headers=auth_headers("carla")).status_code == 403

    def test_rrhh_manages_requests_but_not_configuration(self, escenario):
        registrar(escenario)
        solicitudes = escenario.get(f"{API}/vacaciones/admin/solicitudes", headers=auth_headers("rrhh"))
        assert solicitudes.status_code == 200
        assert solicitudes.json()["total"] == 1

        assert escenario.get(f"{API}/vacaciones/admin/config-flujo", headers=auth_headers("rrhh")).status_code == 403

    def test_superadmin_username_bypasses_roles(self, escenario):
        response = escenario.get(f"{API}/vacaciones/admin/config-flujo", headers=auth_headers("superadmin"))
        assert response.status_code == 200
        assert response.json()["total"] == 3

    def test_config_flujo_crud(self, escenario):
        headers = auth_headers("admin")
        creada = escenario.post(
            f"{API}/vacaciones/admin/config-flujo",
            json={"tipo_solicitud": "P", "codigo_permiso": "PM", "niveles_requeridos": 1,
                  "fecha_desde": "2024-01-01", "descripcion": "Permisos médicos"},
            headers=headers
        )
        assert creada.status_code == 201
        id_config = creada.json()["id_config"]
        assert creada.json()["permiso_nombre"] == "Permiso médico"

        editada = escenario.put(
            f"{API}/vacaciones/admin/config-flujo/{id_config}", json={"niveles_requeridos": 2}, headers=headers
        )
        assert editada.json()["niveles_requeridos"] == 2

        invalida = escenario.put(
            f"{API}/vacaciones/admin/config-flujo/{id_config}", json={"tipo_solicitud": "V"}, headers=headers
        )
        assert invalida.status_code == 422

        borrada = escenario.delete(f"{API}/vacaciones/admin/config-flujo/{id_config}", headers=headers)
        assert borrada.json()["activo"] == "N"

        assert escenario.get(f"{API}/vacaciones/admin/config-flujo/9999", headers=headers).status_code == 404

    def test_sustituto_overlap_via_api(self, escenario):
        headers = auth_headers("admin")
        payload = {
            "codigo_trabajador_titular": "100",
            "codigo_trabajador_sustituto": "200",
            "fecha_desde": "2024-05-01",
            "fecha_hasta": "2024-06-15"
        }
        primero = escenario.post(f"{API}/vacaciones/admin/sustituto", json=payload, headers=headers)
        assert primero.status_code == 201
        assert primero.json()["sustituto_nombre"] == "Bruno Suplente"

        segundo = escenario.post(
            f"{API}/vacaciones/admin/sustituto",
            json=dict(payload, codigo_trabajador_sustituto="300", fecha_desde="2024-06-01"),
            headers=headers
        )
        assert segundo.status_code == 422
        assert segundo.json()["details"]["id_sustituto_existente"] == primero.json()["id_sustituto"]

    def test_jerarquia_listing(self, escenario):
        response = escenario.get(
            f"{API}/vacaciones/admin/jerarquia", params={"codigo_area": "05"}, headers=auth_headers("admin")
        )
        assert response.status_code == 200
        assert [j["aprobador_nombre"] for j in response.json()["jerarquias"]] == ["Ana Jefa", "Gerardo Gerente"]

    def test_simular_flujo(self, escenario, db):
        crear_sustituto(
            db,
            codigo_trabajador_titular="150",
            codigo_trabajador_sustituto="200",
            fecha_desde=date(2024, 5, 1),
            fecha_hasta=date(2024, 6, 15)
        )
        response = escenario.post(
            f"{API}/vacaciones/admin/simular-flujo",
            json={"tipo_solicitud": "V", "codigo_trabajador": "300", "dias_solicitados": "3",
                  "fecha_evaluacion": "2024-06-01"},
            headers=auth_headers("admin")
        )
        assert response.status_code == 200
        body = response.json()
        assert body["niveles_requeridos"] == 2
        assert [a["codigo_trabajador_aprueba"] for a in body["aprobadores"]] == ["100", "200"]
        assert body["aprobadores"][1]["aprobador_nombre"] == "Bruno Suplente"
        assert db.query(Solicitud).count() == 0

    def test_simular_flujo_incomplete_chain(self, escenario):
        response = escenario.post(
            f"{API}/vacaciones/admin/simular-flujo",
            json={"tipo_solicitud": "V", "codigo_area": "99", "dias_solicitados": "2",
                  "fecha_evaluacion": "2024-06-01"},
            headers=auth_headers("admin")
        )
        assert response.status_code == 422
        assert response.json()["type"] == "incomplete_approval_chain"
        assert response.json()["details"]["niveles_faltantes"] == [1]

    def test_simular_flujo_permission_requires_code(self, escenario):
        url = f"{API}/vacaciones/admin/simular-flujo"
        sin_codigo = escenario.post(
            url,
            json={"tipo_solicitud": "P", "codigo_area": "05", "dias_solicitados": "1",
                  "fecha_evaluacion": "2024-06-01"},
            headers=auth_headers("admin")
        )
        assert sin_codigo.status_code == 422
        assert sin_codigo.json()["type"] == "validation_error"

        con_codigo = escenario.post(
            url,
            json={"tipo_solicitud": "P", "codigo_permiso": "PM", "codigo_area": "05", "dias_solicitados": "1",
                  "fecha_evaluacion": "2024-06-01"},
            headers=auth_headers("admin")
        )
        assert con_codigo.status_code == 200
        assert con_codigo.json()["niveles_requeridos"] == 1

    def test_annulment(self, escenario):
        id_solicitud = registrar(escenario).json()["id_solicitud"]
        url = f"{API}/vacaciones/admin/solicitud/{id_solicitud}/anular"

        en_blanco = escenario.post(url, json={"motivo": "   "}, headers=auth_headers("rrhh"))
        assert en_blanco.status_code == 422

        anulada = escenario.post(url, json={"motivo": "Registrada por error"}, headers=auth_headers("rrhh"))
        assert anulada.status_code == 200
        assert anulada.json()["estado"] == "N"
        assert anulada.json()["usuario_anulacion"] == "rrhh"

        again = escenario.post(url, json={"motivo": "Otra vez"}, headers=auth_headers("rrhh"))
        assert again.status_code == 409

    def test_reports(self, escenario):
        registrar(escenario)
        headers = auth_headers("rrhh")

        estadisticas = escenario.get(f"{API}/vacaciones/admin/estadisticas", headers=headers)
        assert estadisticas.status_code == 200
        assert estadisticas.json()["solicitudes_pendientes"] == 1

        saldos = escenario.get(
            f"{API}/vacaciones/admin/saldos", params={"codigo_area": "05", "limit": 50}, headers=headers
        )
        carla = next(s for s in saldos.json()["saldos"] if s["codigo_trabajador"] == "300")
        assert Decimal(carla["dias_pendientes"]) == Decimal("3")

        export = escenario.get(f"{API}/vacaciones/admin/solicitudes/export", headers=headers)
        assert export.status_code == 200
        assert export.headers["content-type"].startswith(
            "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
        )
        assert export.content[:2] == b"PK"


class TestCatalogosApi:
    def test_search_requires_login(self, client):
        assert client.get(f"{API}/vacaciones/admin/buscar/areas").status_code == 401

    def test_search_workers(self, client, usuarios):
        response = client.get(
            f"{API}/vacaciones/admin/buscar/trabajadores", params={"q": "ana"}, headers=auth_headers("carla")
        )
        assert response.status_code == 200
        body = response.json()
        assert [t["codigo"] for t in body["items"]] == ["100", "300", "301"]
        assert body["page"] == 1

    def test_search_permissions(self, client, usuarios):
        response = client.get(
            f"{API}/vacaciones/admin/buscar/permisos", params={"q": "X"}, headers=auth_headers("carla")
        )
        assert [p["codigo"] for p in response.json()["items"]] == ["X9"]
