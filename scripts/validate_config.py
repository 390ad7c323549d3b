#!/usr/bin/env python3
"""Configuration validation script."""

import sys
from pathlib import Path

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from stork_validator.config.loader import ConfigLoader
from stork_validator.config.validation import ConfigValidator
from stork_validator.egress.proxies import assign_proxies, load_proxy_pool, resolve_egress
from stork_validator.errors import UnsupportedEgress


def main():
    """Main validation function."""
    config_path = Path(sys.argv[1]) if len(sys.argv) > 1 else Path("config.json")
    print(f"🔍 Validating {config_path}...")

    loader = ConfigLoader.create(config_path.resolve())
    config = loader.merge_config()

    errors = ConfigValidator.validate_config(config)
    if errors:
        print(f"❌ Found {len(errors)} validation errors:")
        for error in errors:
            print(f"  • {error.field}: {error.message} (value: {error.value})")
        return 1

    app_config = loader.load()
    print(f"✅ Configuration is valid ({len(app_config.accounts)} accounts)")

    pool = load_proxy_pool(app_config.proxy_file)
    print(f"\n🌐 Proxy pool: {len(pool)} entries from {app_config.proxy_file}")

    all_valid = True
    for uri in pool:
        try:
            egress = resolve_egress(uri)
            print(f"  • {uri} → {egress.family.value}")
        except UnsupportedEgress as e:
            print(f"  ❌ {e}")
            all_valid = False

    print("\n📋 Proxy assignment:")
    for assignment in assign_proxies(app_config.accounts, pool):
        account = assignment.account
        status = "ready" if account.has_credentials else "skipped (missing username/password)"
        print(f"  • {account.username or '<unnamed>'}: {len(assignment.proxies)} proxies, {status}")

    return 0 if all_valid else 1


if __name__ == "__main__":
    sys.exit(main())
