# services_recaptcha.py — verificación anti-bots (reCAPTCHA) para el formulario
import logging

import requests

from config import Settings

log = logging.getLogger("contact.recaptcha")


class SpamGate:
    """Checks the client's anti-automation token.

    Order matters: skip flag, bypass sentinels, missing secret (fail-open),
    then the remote verdict. A transport error only passes in permissive mode.
    """

    def __init__(self, settings: Settings):
        self.secret = settings.recaptcha_secret
        self.verify_url = settings.recaptcha_verify_url
        self.skip = settings.recaptcha_skip
        self.permissive = settings.permissive
        self.bypass_tokens = frozenset(settings.recaptcha_bypass_tokens)
        self.timeout = settings.recaptcha_timeout

    def verify(self, token: str) -> bool:
        if self.skip:
            log.info("[RECAPTCHA] verification skipped by configuration")
            return True
        if token in self.bypass_tokens:
            log.info("[RECAPTCHA] bypass token accepted")
            return True
        if not self.secret:
            log.warning("[RECAPTCHA] no secret configured, allowing submission")
            return True

        try:
            r = requests.post(
                self.verify_url,
                data={"secret": self.secret, "response": token},
                timeout=self.timeout,
            )
            r.raise_for_status()
            payload = r.json()
        except (requests.RequestException, ValueError) as e:
            log.error("[RECAPTCHA] verification error: %s", e)
            return self.permissive

        ok = bool(payload.get("success")) if isinstance(payload, dict) else False
        if not ok:
            log.info("[RECAPTCHA] rejected: %s", payload.get("error-codes") if isinstance(payload, dict) else payload)
        return ok

    def status(self) -> str:
        if self.skip:
            return "skipped"
        return "configured" if self.secret else "not configured"
