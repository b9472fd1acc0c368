"""Request payloads shared by the API tests."""

ITEM_FORM = {
    "item_name": "Black backpack",
    "description": "North Face, laptop inside",
    "location": "Gate 12",
    "category": "bags",
    "flight_number": "AC123",
    "date_found": "2026-10-01T10:00:00",
}

CUSTOMER_FORM = {
    "customer_name": "Jane Traveller",
    "customer_email": "jane@example.com",
    "customer_phone": "+1 555 0100",
    "customer_identification": "P1234567",
    "signature": "data:image/png;base64,AAAA",
}


async def report(client, headers, files=None, **overrides):
    return await client.post("/api/items", data={**ITEM_FORM, **overrides}, files=files, headers=headers)
