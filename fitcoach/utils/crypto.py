# fitcoach/utils/crypto.py
"""
Cifrado de tokens OAuth de wearables (Fernet).

Los tokens nunca se guardan en claro: se cifran al conectar y se
descifran solo cuando hace falta llamar al proveedor.
"""
import logging
import os
from typing import Optional

from cryptography.fernet import Fernet, InvalidToken

logger = logging.getLogger(__name__)


class TokenCipher:
    """Extensión Flask mínima alrededor de Fernet."""

    def __init__(self, app=None):
        self._fernet: Optional[Fernet] = None
        if app is not None:
            self.init_app(app)

    def init_app(self, app) -> None:
        key = app.config.get("TOKEN_ENCRYPTION_KEY")
        if not key:
            if os.getenv("FLASK_ENV", "").lower() == "production":
                raise RuntimeError(
                    "TOKEN_ENCRYPTION_KEY es obligatorio en producción. "
                    "Genera una con Fernet.generate_key()."
                )
            logger.warning("TOKEN_ENCRYPTION_KEY no definido: usando clave temporal (NO PRODUCCIÓN)")
            key = Fernet.generate_key()
        if isinstance(key, str):
            key = key.encode()
        try:
            self._fernet = Fernet(key)
        except (ValueError, TypeError) as e:
            raise ValueError(f"TOKEN_ENCRYPTION_KEY inválido: {e}") from e
        app.extensions["token_cipher"] = self

    @property
    def fernet(self) -> Fernet:
        if self._fernet is None:
            raise RuntimeError("TokenCipher no inicializado (falta init_app)")
        return self._fernet

    def encrypt(self, plaintext: Optional[str]) -> Optional[str]:
        if not plaintext:
            return None
        return self.fernet.encrypt(plaintext.encode()).decode()

    def decrypt(self, ciphertext: Optional[str]) -> Optional[str]:
        """Devuelve None si el token no se puede descifrar (clave rotada)."""
        if not ciphertext:
            return None
        try:
            return self.fernet.decrypt(ciphertext.encode()).decode()
        except InvalidToken:
            logger.error("No se pudo descifrar un token almacenado (¿clave rotada?)")
            return None
