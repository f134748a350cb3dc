import os
from dotenv import load_dotenv

# Load Environment Variables from project root .env
env_path = os.path.join(os.path.dirname(__file__), "../.env")
load_dotenv(env_path)


class Settings:
    # ═══════════════════════════════════════════════════════════════════
    # FUZE VAULT CLIENT CONFIGURATION (Environment-Based)
    # ═══════════════════════════════════════════════════════════════════

    # --- Console ---
    SILENT_MODE = os.getenv("SILENT_MODE", "false").lower() in ("1", "true", "yes")

    # --- Network ---
    RPC_URL = os.getenv("RPC_URL", "https://api.devnet.solana.com")
    COMMITMENT = os.getenv("COMMITMENT", "confirmed")
    RPC_TIMEOUT_S = float(os.getenv("RPC_TIMEOUT_S", "30"))

    # --- Programs ---
    VAULT_PROGRAM_ID = os.getenv(
        "VAULT_PROGRAM_ID", "Fg6PaFpoGXkYsidMpWTK6W2BeZ7FEfcYkg476zPFsLnS"
    )
    ZETA_PROGRAM_ID = os.getenv(
        "ZETA_PROGRAM_ID", "BG3oRikW8d16YjUEmX3ZxHm9SiJzrGtMhsSR8aCw1Cd7"
    )
    ZETA_DEX_PROGRAM_ID = os.getenv(
        "ZETA_DEX_PROGRAM_ID", "5CmWtUihvSrJpaUrpJ3H1jUa9DRjYz4v2xs6c3EgQWMf"
    )
    SOLEND_PROGRAM_ID = os.getenv(
        "SOLEND_PROGRAM_ID", "ALend7Ketfx5bxh6ghsCDXAoDrhvEmsXT3cynB6aPLgx"
    )

    # --- Mints ---
    USDC_MINT = os.getenv(
        "USDC_MINT", "6PEh8n3p7BbCTykufbq1nSJYAZvUp6gSwEANAs1ZhsCX"
    )

    # Paths
    LOG_DIR = os.getenv(
        "LOG_DIR",
        os.path.abspath(os.path.join(os.path.dirname(__file__), "../logs")),
    )
