"""
Login view - the sign-in form.
"""

from dataclasses import dataclass


@dataclass
class LoginForm:
    email: str = ""
    password: str = ""
    is_sign_up: bool = False

    @property
    def can_submit(self) -> bool:
        return bool(self.email.strip()) and bool(self.password)

    @property
    def submit_label(self) -> str:
        return "Create Account" if self.is_sign_up else "Sign In"

    async def submit(self, app) -> bool:
        """Sign in through ``app`` (a SessionManager). Returns False when the form is incomplete."""
        if not self.can_submit:
            return False
        await app.login(self.email.strip())
        return True
