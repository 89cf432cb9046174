"""
Starts the maintenance worker with the project root on PYTHONPATH
"""
import sys
from pathlib import Path

project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

if __name__ == "__main__":
    from main import main
    import asyncio
    asyncio.run(main())
