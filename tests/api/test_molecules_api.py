"""
分子 API 测试
"""
import math

import pytest

AMMONIA = {
    "name": "Ammonia",
    "formula": "NH3",
    "structure": {
        "atoms": [
            {"id": 1, "x": 0.0, "y": 0.0, "z": 0.0, "color": 0x0000FF},
            {"id": 2, "x": 0.94, "y": -0.33, "z": 0.0},
            {"id": 3, "x": -0.47, "y": -0.33, "z": 0.81},
            {"id": 4, "x": -0.47, "y": -0.33, "z": -0.81},
        ],
        "bonds": [{"atomIds": [1, 2]}, {"atomIds": [1, 3]}, {"atomIds": [1, 4]}],
        "lonePairs": [{"x": 0.0, "y": 0.6, "z": 0.0}],
    },
}


class TestHealth:
    """健康检查测试"""

    def test_root_health(self, api_client):
        response = api_client.get("/health")
        assert response.status_code == 200
        assert response.json()["data"]["status"] == "healthy"

    def test_api_health_reports_molecules(self, api_client):
        data = api_client.get("/api/health").json()["data"]
        assert data["molecules"] == 2


class TestMoleculesAPI:
    """分子 API 测试"""

    def test_get_water(self, api_client):
        response = api_client.get("/api/molecules/1")
        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "water"
        assert data["formula"] == "H2O"
        assert len(data["structure"]["atoms"]) == 3
        assert data["structure"]["bonds"][0] == {"atomIds": [1, 2]}
        assert "lonePairs" not in data["structure"]

    def test_get_missing(self, api_client):
        response = api_client.get("/api/molecules/99")
        assert response.status_code == 404
        body = response.json()
        assert body["success"] is False
        assert body["code"] == 40401
        assert body["request_id"] == response.headers["X-Request-ID"]

    def test_find_by_name(self, api_client):
        response = api_client.get("/api/molecules/name/METHANE")
        assert response.status_code == 200
        assert response.json()["id"] == 2

    def test_find_by_name_missing(self, api_client):
        assert api_client.get("/api/molecules/name/ammonia").status_code == 404

    def test_list(self, api_client):
        data = api_client.get("/api/molecules").json()
        assert [m["id"] for m in data] == [1, 2]

    def test_create(self, api_client):
        response = api_client.post("/api/molecules", json=AMMONIA)
        assert response.status_code == 200
        data = response.json()
        assert data["id"] == 3
        assert data["structure"]["lonePairs"] == [{"x": 0.0, "y": 0.6, "z": 0.0}]
        assert data["structure"]["atoms"][1]["color"] == 0xFFFFFF

        assert api_client.get("/api/molecules/name/ammonia").json()["id"] == 3

    def test_create_with_dangling_bond(self, api_client):
        payload = {
            "name": "broken",
            "formula": "X",
            "structure": {
                "atoms": [{"id": 1, "x": 0, "y": 0, "z": 0}],
                "bonds": [{"atomIds": [1, 2]}],
            },
        }
        response = api_client.post("/api/molecules", json=payload)
        assert response.status_code == 400
        assert response.json()["code"] == 40001
        assert len(api_client.get("/api/molecules").json()) == 2

    def test_create_with_coincident_bonded_atoms(self, api_client):
        payload = {
            "name": "collapsed",
            "formula": "X2",
            "structure": {
                "atoms": [
                    {"id": 1, "x": 1.0, "y": 1.0, "z": 1.0},
                    {"id": 2, "x": 1.0, "y": 1.0, "z": 1.0},
                ],
                "bonds": [{"atomIds": [1, 2]}],
            },
        }
        response = api_client.post("/api/molecules", json=payload)
        assert response.status_code == 400
        assert response.json()["code"] == 40001
        assert len(api_client.get("/api/molecules").json()) == 2

    @pytest.mark.parametrize("literal", ["NaN", "Infinity", "-Infinity"])
    def test_create_with_non_finite_coordinate(self, api_client, literal):
        body = (
            '{"name": "bad", "formula": "X2", "structure": {"atoms": ['
            f'{{"id": 1, "x": {literal}, "y": 0, "z": 0}}, {{"id": 2, "x": 1, "y": 0, "z": 0}}],'
            ' "bonds": [{"atomIds": [1, 2]}]}}'
        )
        response = api_client.post(
            "/api/molecules", content=body, headers={"Content-Type": "application/json"}
        )
        assert response.status_code == 400
        assert response.json()["code"] == 40002
        assert len(api_client.get("/api/molecules").json()) == 2

    def test_create_with_non_finite_lone_pair(self, api_client):
        body = (
            '{"name": "bad", "formula": "X", "structure": {'
            '"atoms": [{"id": 1, "x": 0, "y": 0, "z": 0}],'
            ' "lonePairs": [{"x": NaN, "y": 0, "z": 0}]}}'
        )
        response = api_client.post(
            "/api/molecules", content=body, headers={"Content-Type": "application/json"}
        )
        assert response.status_code == 400
        assert response.json()["code"] == 40002

    @pytest.mark.parametrize("payload", [
        {"formula": "X", "structure": {"atoms": [{"id": 1, "x": 0, "y": 0, "z": 0}]}},
        {"name": "x", "formula": "X", "structure": {"atoms": []}},
        {"name": "x", "formula": "X", "structure": {"atoms": [{"id": 1, "x": 0, "y": 0}]}},
        {"name": "x", "formula": "X", "structure": {
            "atoms": [{"id": 1, "x": 0, "y": 0, "z": 0}],
            "bonds": [{"atomIds": [1, 2, 3]}],
        }},
    ])
    def test_create_invalid_payload(self, api_client, payload):
        response = api_client.post("/api/molecules", json=payload)
        assert response.status_code == 400
        assert response.json()["code"] == 40002


class TestGeometryAPI:
    """几何计算 API 测试"""

    def test_water_geometry(self, api_client):
        response = api_client.get("/api/molecules/1/geometry")
        assert response.status_code == 200
        data = response.json()
        assert data["moleculeId"] == 1
        assert data["bondLengthFactor"] == 1.0
        assert data["positions"]["2"] == [-0.8, 0.6, 0.0]
        assert len(data["bonds"]) == 2
        assert data["angles"][0]["degrees"] == pytest.approx(math.degrees(math.acos(-0.28)))
        assert "startAngle" in data["angles"][0]["arc"]

    def test_scaled_geometry(self, api_client):
        data = api_client.get("/api/molecules/2/geometry", params={"bondLengthFactor": 2.0}).json()
        for bond in data["bonds"]:
            assert bond["length"] == pytest.approx(2.0 * math.sqrt(3.0))

    def test_invalid_factor(self, api_client):
        response = api_client.get("/api/molecules/1/geometry", params={"bondLengthFactor": 0})
        assert response.status_code == 400

    def test_missing_molecule(self, api_client):
        assert api_client.get("/api/molecules/42/geometry").status_code == 404
