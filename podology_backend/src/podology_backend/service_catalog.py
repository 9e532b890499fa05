# Services offered by the practice. Durations are human-readable and go
# through utils.parse_duration before any scheduling arithmetic.
services = [
    {
        "id": "terapia-podal",
        "name": "Terapia Podal",
        "category": "Principais Serviços",
        "price": 30,
        "duration": "1h",
    },
    {
        "id": "pedicure-medical",
        "name": "Pedicure Medical",
        "category": "Principais Serviços",
        "price": 35,
        "duration": "1h",
    },
    {
        "id": "spa-pes",
        "name": "SPA dos Pés",
        "category": "Principais Serviços",
        "price": 50,
        "duration": "1h30m",
    },
    {
        "id": "plastica-pes",
        "name": "Plástica dos Pés",
        "category": "Principais Serviços",
        "price": 45,
        "duration": "1h20m",
    },
    {
        "id": "plastica-gelinho",
        "name": "Plástica + Gelinho",
        "category": "Principais Serviços",
        "price": 50,
        "duration": "1h40m",
    },
    {
        "id": "tradicional-gelinho",
        "name": "Tradicional + Gelinho",
        "category": "Pedicure",
        "price": 30,
        "duration": "1h",
    },
    {
        "id": "tradicional-verniz",
        "name": "Tradicional + Verniz",
        "category": "Pedicure",
        "price": 20,
        "duration": "50min",
    },
    {
        "id": "gelinho-pes",
        "name": "Gelinho Pés",
        "category": "Verniz",
        "price": 15,
        "duration": "30min",
    },
    {
        "id": "gelinho-reconstrucao",
        "name": "Gelinho c/ Reconstrução",
        "category": "Verniz",
        "price": 20,
        "duration": "45min",
    },
    {
        "id": "parafina",
        "name": "Parafina Mãos/Pés",
        "category": "Outros Serviços",
        "price": 10,
        "duration": "20min",
    },
    {
        "id": "massagem-acupuntura",
        "name": "Massagem e Acupuntura Electrónica",
        "category": "Outros Serviços",
        "price": 30,
        "duration": "40min",
    },
    {
        "id": "detox-ionico",
        "name": "Detox Iónico",
        "category": "Outros Serviços",
        "price": 15,
        "duration": "30min",
    },
    {
        "id": "jelly-spa",
        "name": "Jelly SPA",
        "category": "Outros Serviços",
        "price": 25,
        "duration": "45min",
    },
]


def get_service_by_id(service_id: str) -> dict | None:
    for s in services:
        if s["id"] == service_id:
            return s
    return None


def get_services_by_category(category: str) -> list[dict]:
    return [s for s in services if s["category"] == category]
