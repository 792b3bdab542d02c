#!/usr/bin/env python3
"""
Script para esperar a la base de datos y crear el esquema
Ejecutar desde la raíz del proyecto: python scripts/init_db.py
"""
import sys
import os

# Agregar el directorio raíz al path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy.exc import OperationalError

from dispatch_api.config.settings import settings
from dispatch_api.config.database import init_db
from dispatch_api.core.logging_config import setup_logging

def main() -> int:
    setup_logging(settings.log_level)
    print(f"🔧 Configurando base de datos: {settings.database_host}")

    try:
        init_db()
    except OperationalError as e:
        print(f"❌ Base de datos no disponible: {e}")
        return 1

    print("🎉 Esquema listo (tabla delivery_order)")
    return 0

if __name__ == "__main__":
    sys.exit(main())
