# Labels printed on the notice board for each expense category code.
EXPENSE_CATEGORY_LABELS = {
    "APA_RECE": "Apă rece",
    "APA_CALDA": "Apă caldă",
    "CANALIZARE": "Canalizare",
    "GAZ": "Gaz",
    "CURENT_COMUN": "Curent comun",
    "CALDURA": "Căldură",
    "ASCENSOR": "Ascensor",
    "CURATENIE": "Curățenie",
    "GUNOI": "Gunoi",
    "FOND_RULMENT": "Fond rulment",
    "FOND_REPARATII": "Fond reparații",
    "ADMINISTRARE": "Administrare",
    "ALTE_CHELTUIELI": "Alte cheltuieli",
}

# Expense categories billed from meter readings, and the meter type they read.
CATEGORY_METER_TYPES = {
    "APA_RECE": "APA_RECE",
    "APA_CALDA": "APA_CALDA",
    "GAZ": "GAZ",
    "CURENT_COMUN": "CURENT",
    "CALDURA": "CALDURA",
}

# Distribution mode codes as stored by the association records.
STORED_DISTRIBUTION_MODES = {
    "COTA_INDIVIZA": "BY_QUOTA_SHARE",
    "PERSOANE": "BY_OCCUPANT_COUNT",
    "APARTAMENT": "BY_UNIT_EQUAL",
    "MANUAL": "MANUAL",
    "CONSUM": "BY_CONSUMPTION",
}

PAYMENT_STATUS_CONFIRMED = "CONFIRMED"

DEMO_ASSOCIATION = {
    "name": "Asociația de Proprietari Bloc A1",
    "due_day": 25,
    "daily_penalty_rate_percent": 0.02,
    "funds": [
        ("Fond de rulment", 50),
        ("Fond de reparații", 100),
    ],
}


def category_label(code: str) -> str:
    return EXPENSE_CATEGORY_LABELS.get(code, code)
