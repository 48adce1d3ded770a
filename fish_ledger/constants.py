APP_NAME = "Fish Ledger"

DATA_DIR = "data"
DB_FILE_NAME = "fish_ledger.db"

TABLE_SCHEMA_VERSION = "schema_version"
SCHEMA_VERSION = "1.0.0"

# Loading categories
FARMER_INTAKE = "FARMER_INTAKE"
AGENT_INTAKE = "AGENT_INTAKE"
CLIENT_DISPATCH = "CLIENT_DISPATCH"

INTAKE_CATEGORIES = (FARMER_INTAKE, AGENT_INTAKE)
LOADING_CATEGORIES = (FARMER_INTAKE, AGENT_INTAKE, CLIENT_DISPATCH)

# Counterparty kinds (one ledger per kind + name)
PARTY_CLIENT = "client"
PARTY_FARMER = "farmer"
PARTY_AGENT = "agent"

PARTY_KIND_BY_CATEGORY = {
    FARMER_INTAKE: PARTY_FARMER,
    AGENT_INTAKE: PARTY_AGENT,
    CLIENT_DISPATCH: PARTY_CLIENT,
}

BILL_PREFIX_BY_CATEGORY = {
    FARMER_INTAKE: "FL",
    AGENT_INTAKE: "AL",
    CLIENT_DISPATCH: "CL",
}
