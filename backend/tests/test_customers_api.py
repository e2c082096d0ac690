"""Tests for the /customers endpoints."""
import pytest

CUSTOMERS_URL = "/api/v1/customers"


def test_create_and_list(client):
    client.post(CUSTOMERS_URL, json={"name": "Zeynep Kaya"})
    client.post(CUSTOMERS_URL, json={"name": "  Acme Travel ", "type": "corporate", "tax_number": "1234567890"})

    customers = client.get(CUSTOMERS_URL).json()
    assert [c["name"] for c in customers] == ["Acme Travel", "Zeynep Kaya"]
    assert customers[0]["type"] == "corporate"
    assert customers[1]["type"] == "individual"


@pytest.mark.parametrize("name", ["", "   ", "\t\n"])
def test_blank_name_rejected(client, name):
    response = client.post(CUSTOMERS_URL, json={"name": name})
    assert response.status_code == 422
    assert client.get(CUSTOMERS_URL).json() == []
