"""
Checks the project configuration: environment variables and storage directories
"""
import os
import sys
from pathlib import Path
from dotenv import load_dotenv

def check_env_file():
    """Checks that a .env file exists"""
    env_path = Path(".env")
    if not env_path.exists():
        print("⚠️  .env file not found, defaults will be used")
        print("   Create one from env.example:")
        print("   cp env.example .env")
        return True
    print("✅ .env file found")
    return True

def check_database_url():
    db_url = os.getenv("DATABASE_URL", "")
    if not db_url:
        print("⚠️  DATABASE_URL not set, the default SQLite database will be used")
        return True
    
    if db_url.startswith("sqlite"):
        print("✅ DATABASE_URL: SQLite (development)")
    elif db_url.startswith("postgresql"):
        print("✅ DATABASE_URL: PostgreSQL (production)")
    else:
        print("⚠️  DATABASE_URL has an unexpected format")
    
    return True

def check_asset_storage():
    """Checks that the asset root exists and is writable"""
    root = Path(os.getenv("ASSET_STORAGE_ROOT", "./storage"))
    bucket = os.getenv("ASSET_BUCKET", "menu-images").strip()
    
    if not bucket or "/" in bucket:
        print("❌ ASSET_BUCKET must be a single non-empty path segment")
        return False
    
    bucket_dir = root / bucket
    try:
        bucket_dir.mkdir(parents=True, exist_ok=True)
        probe = bucket_dir / ".write_test"
        probe.write_bytes(b"ok")
        probe.unlink()
    except OSError as e:
        print(f"❌ Asset storage {bucket_dir} is not writable: {e}")
        return False
    
    print(f"✅ Asset storage: {bucket_dir}")
    return True

def check_upload_limits():
    max_bytes = os.getenv("ASSET_MAX_BYTES", str(5 * 1024 * 1024))
    try:
        if int(max_bytes) <= 0:
            print("❌ ASSET_MAX_BYTES must be positive")
            return False
    except ValueError:
        print("❌ ASSET_MAX_BYTES must be an integer")
        return False
    
    extensions = [e.strip() for e in os.getenv("ALLOWED_IMAGE_EXTENSIONS", "jpg,jpeg,png,webp,gif").split(",") if e.strip()]
    if not extensions:
        print("❌ ALLOWED_IMAGE_EXTENSIONS is empty")
        return False
    
    print(f"✅ Uploads: up to {int(max_bytes)} bytes, types {', '.join(extensions)}")
    return True

def check_reconcile_interval():
    interval = os.getenv("RECONCILE_INTERVAL_MINUTES", "60")
    try:
        if int(interval) < 1:
            print("❌ RECONCILE_INTERVAL_MINUTES must be at least 1")
            return False
    except ValueError:
        print("❌ RECONCILE_INTERVAL_MINUTES must be an integer")
        return False
    print(f"✅ Orphan asset sweep every {interval} minutes")
    return True

def check_directories():
    for dir_name in ["logs"]:
        dir_path = Path(dir_name)
        if not dir_path.exists():
            dir_path.mkdir(exist_ok=True)
            print(f"✅ Created directory: {dir_name}")
        else:
            print(f"✅ Directory {dir_name} exists")
    
    return True

def main():
    print("Checking project configuration...\n")
    
    load_dotenv()
    
    checks = [
        (".env file", check_env_file),
        ("DATABASE_URL", check_database_url),
        ("Asset storage", check_asset_storage),
        ("Upload limits", check_upload_limits),
        ("Reconciliation", check_reconcile_interval),
        ("Directories", check_directories),
    ]
    
    results = []
    for name, check_func in checks:
        try:
            result = check_func()
            results.append((name, result))
        except Exception as e:
            print(f"❌ Check {name} crashed: {e}")
            results.append((name, False))
        print()
    
    print("=" * 50)
    passed = sum(1 for _, result in results if result)
    total = len(results)
    
    for name, result in results:
        status = "✅" if result else "❌"
        print(f"{status} {name}")
    
    print("=" * 50)
    print(f"Passed: {passed}/{total}")
    
    if passed == total:
        print("\n✅ All checks passed.")
        return 0
    print("\n⚠️  Some checks failed. Fix them before starting.")
    return 1

if __name__ == "__main__":
    sys.exit(main())
