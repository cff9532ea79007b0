# extensions.py — punto único de extensiones compartidas
# Una sola instancia de SQLAlchemy y del limitador para evitar import loops.
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_sqlalchemy import SQLAlchemy

# Instancia global que importan modelos, crud y app
db = SQLAlchemy()

# Sin límites globales: solo POST /api/contact lleva límite (ver routes_contact)
limiter = Limiter(key_func=get_remote_address, default_limits=[])

__all__ = ["db", "limiter"]
