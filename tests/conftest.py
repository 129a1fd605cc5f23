# Tests configuration for the report generator
import io
import sys
from datetime import date, datetime
from pathlib import Path

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from documents import LineItem, PartyInfo, QuoteData, QuoteDocument, Technician, WorkOrderData, WorkOrderDocument
from pdf_surface import DrawingSurface


def make_items(count, kind="material"):
    """`count` well-formed items of 1 x R$ 10,00."""
    return [LineItem(f"Item {i + 1}", kind, 1, 1000, 1000) for i in range(count)]


@pytest.fixture
def surface():
    """A drawing surface writing to memory."""
    return DrawingSurface(io.BytesIO())


@pytest.fixture
def missing_logo(tmp_path):
    return str(tmp_path / "no-logo.png")


@pytest.fixture
def client_info():
    return PartyInfo(
        name="Acme Offices",
        contact_name="Maria Souza",
        email="maria@acme.test",
        phone="(11) 5555-0100",
        address="Av. Paulista, 1000 - Sao Paulo",
    )


@pytest.fixture
def quote_data(client_info):
    """Quote #7: one filter (2 x 5000) and one labor line (1 x 15000)."""
    return QuoteData(
        quote=QuoteDocument(
            id=7,
            created_at=datetime(2024, 5, 10, 9, 30),
            status="pending",
            valid_until=date(2024, 5, 25),
            description="Preventive maintenance of two split units",
            total_cents=25000,
        ),
        client=client_info,
        items=[
            LineItem("Filter", "material", 2, 5000, 10000),
            LineItem("Labor", "labor", 1, 15000, 15000),
        ],
    )


@pytest.fixture
def work_order_data(client_info):
    return WorkOrderData(
        work_order=WorkOrderDocument(
            id=12,
            created_at=datetime(2024, 6, 3, 14, 0),
            service_type="installation",
            status="in_progress",
            scheduled_date=date(2024, 6, 10),
            description="Customer asked for installation after 2pm",
            service_description="Install 12000 BTU split unit in the meeting room",
        ),
        client=client_info,
        items=[
            LineItem("Copper pipe 3m", "material", 3, 4000, 12000),
            LineItem("Installation", "labor", 1, 30000, 30000),
            LineItem("Wall bracket", "material", 1, 8000, 8000),
        ],
        technicians=[
            Technician("Joao Lima", role="technician", email="joao@samclimatiza.test"),
            Technician("Ana Costa", role="technician"),
        ],
    )


@pytest.fixture
def quote_payload():
    """Quote #7 as the JSON the routes receive (camelCase keys)."""
    return {
        "quote": {
            "id": 7,
            "createdAt": "2024-05-10T09:30:00.000Z",
            "validUntil": "2024-05-25",
            "status": "approved",
            "description": "Preventive maintenance",
            "total": 25000,
        },
        "client": {"name": "Acme Offices", "contactName": "Maria Souza"},
        "items": [
            {"description": "Filter", "type": "material", "quantity": 2, "unitPrice": 5000, "total": 10000},
            {"description": "Labor", "type": "labor", "quantity": 1, "unitPrice": 15000, "total": 15000},
        ],
    }


@pytest.fixture
def work_order_payload():
    return {
        "workOrder": {
            "id": 12,
            "createdAt": "2024-06-03T14:00:00Z",
            "scheduledDate": "2024-06-10",
            "status": "completed",
            "description": None,
        },
        "service": {"serviceType": "repair", "description": "Compressor not starting"},
        "client": {"name": "Padaria Central", "phone": "(11) 4444-0000"},
        "items": [
            {"description": "Capacitor", "type": "material", "quantity": 1, "unitPrice": 9000, "total": 9000},
            {"description": "Repair labor", "type": "labor", "quantity": 2, "unitPrice": 12000, "total": 24000},
        ],
        "technicians": [{"name": "Joao Lima", "email": "joao@samclimatiza.test"}],
    }
