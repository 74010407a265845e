# residency_vote/config.py
# Central place for protocol constants and environment settings
import os
from dotenv import load_dotenv

load_dotenv()

# Attribute tag of "country of residence" in identity statements
COUNTRY_OF_RESIDENCY = 4

# The proof has no temporal aspect, but the challenge must match the one used by the dapp.
CHALLENGE = bytes(4)

# Requests bigger than this are rejected as malformed
MAX_BODY_BYTES = 50 * 1024

# --- Verifier service ---
NODE_URL = os.getenv("NODE_URL", "http://localhost:20000")
NODE_TIMEOUT_SECONDS = float(os.getenv("NODE_TIMEOUT_SECONDS", "10"))
PORT = int(os.getenv("PORT", "8100"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "debug")
PUBLIC_KEY_PATH = os.getenv("PUBLIC_KEY_PATH", "public_key.bin")
SECRET_KEY_PATH = os.getenv("SECRET_KEY_PATH", "secret_key.bin")

# "package.module:attribute" of the zero-knowledge proof backend
PROOF_PRIMITIVE = os.getenv("PROOF_PRIMITIVE", "")

# --- Development chain ---
ENABLE_DEV_CHAIN = os.getenv("ENABLE_DEV_CHAIN", "false").lower() in ("1", "true", "yes")
ELECTION_STORE = os.getenv("ELECTION_STORE", "json")  # "json" or "mongo"
ELECTION_DB_PATH = os.getenv("ELECTION_DB_PATH", "data/election.json")
ELECTION_ID = os.getenv("ELECTION_ID", "default")
MONGO_URI = os.getenv("MONGO_URI", "mongodb://localhost:27017")
MONGO_DB = os.getenv("MONGO_DB", "voting_system")
ELECTIONS_COLLECTION_NAME = "elections"
