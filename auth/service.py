"""
auth/service.py -- OTP, registration and login state machine.

Per-session states:

    Anonymous --verify_otp--> EmailVerified(email) --register--> Authenticated
    Anonymous --login--> Authenticated
    Authenticated --logout--> Anonymous

EmailVerified does not imply Authenticated, and authenticating does not clear
the verified-email marker. Only logout (session destroy) does.

The session is passed in explicitly on every call; AuthService itself holds
no per-client state and is shared by all requests.

Layer rule: no imports from api/ and no FastAPI types. Errors are raised as
auth.errors subclasses and mapped to HTTP by the API layer.
"""

from __future__ import annotations

import logging

from auth.errors import NotFound, NotVerified, Unauthenticated
from auth.models import OtpRecord, SessionUser, User
from auth.policy import email_matches_admin_domain
from auth.session import USER_KEY, VERIFIED_EMAIL_KEY, SessionState
from auth.store import OtpStore, UserStore
from auth.tokens import generate_otp, hash_password, verify_password

logger = logging.getLogger("takeoverlab.auth")


class AuthService:
    def __init__(self, user_store: UserStore, otp_store: OtpStore) -> None:
        self.user_store = user_store
        self.otp_store = otp_store

    # ------------------------------------------------------------------
    # OTP
    # ------------------------------------------------------------------

    def issue_otp(self, email: str) -> str:
        """Replace any outstanding code for email with a fresh one and return it.

        Prior records are deleted before the new one is inserted, so once this
        returns exactly one valid code exists for email. Two concurrent calls
        for the same address may briefly leave two rows; the last insert wins
        on the next issuance. No check is made that email belongs to a user.
        """
        code = generate_otp()
        self.otp_store.delete_all(email)
        self.otp_store.create(OtpRecord(email=email, otp=code))
        logger.info("OTP issued for %s", email)
        return code

    def verify_otp(self, session: SessionState, email: str, code: str) -> bool:
        """Mark email as verified in session if code is a live OTP for it.

        The record is left in place; it stays usable until it expires or a
        new code is issued.
        """
        if self.otp_store.find_one(email, code) is None:
            logger.warning("OTP verification failed for %s", email)
            return False
        session.set(VERIFIED_EMAIL_KEY, email)
        logger.info("OTP verified for %s", email)
        return True

    def list_otps(self) -> list[OtpRecord]:
        return self.otp_store.list_all()

    def lookup_otp(self, email: str) -> OtpRecord | None:
        return self.otp_store.find_by_email(email)

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------

    def register(
        self,
        session: SessionState,
        email: str,
        password: str,
        first_name: str | None = None,
        last_name: str | None = None,
        phone: str | None = None,
        address: str | None = None,
        city: str | None = None,
        zip_code: str | None = None,
    ) -> SessionUser:
        """Create an account for the email verified in this session and log it in.

        Raises NotVerified unless the session's verified email equals email.
        Duplicate emails are accepted as separate accounts.
        """
        if session.get(VERIFIED_EMAIL_KEY) != email:
            logger.warning("Registration rejected for unverified email %s", email)
            raise NotVerified()

        user = User(
            email=email,
            password=hash_password(password),
            first_name=first_name,
            last_name=last_name,
            phone=phone,
            address=address,
            city=city,
            zip_code=zip_code,
            is_admin=email_matches_admin_domain(email),
        )
        user.id = self.user_store.create_user(user)

        session_user = SessionUser(id=user.id, email=user.email, is_admin=user.is_admin)
        session.set(USER_KEY, session_user.to_session())
        logger.info("User %s registered (id=%s, admin=%s)", email, user.id, user.is_admin)
        return session_user

    def login(self, session: SessionState, email: str, password: str) -> bool:
        """Authenticate against the oldest account with this email.

        Unknown email and wrong password both return False.
        """
        user = self.user_store.get_by_email(email)
        if user is None or not verify_password(password, user.password):
            logger.warning("Failed login attempt for %s", email)
            return False

        session.set(USER_KEY, SessionUser(id=user.id, email=user.email, is_admin=user.is_admin).to_session())
        logger.info("User %s logged in", email)
        return True

    def logout(self, session: SessionState) -> None:
        session.destroy()
        logger.info("Session destroyed")

    def current_user(self, session: SessionState) -> SessionUser:
        """Return the authenticated-user marker or raise Unauthenticated."""
        data = session.get(USER_KEY)
        if not data:
            raise Unauthenticated()
        return SessionUser.from_session(data)

    # ------------------------------------------------------------------
    # Admin reads (callers enforce require_admin)
    # ------------------------------------------------------------------

    def list_users(self) -> list[User]:
        return self.user_store.list_users()

    def get_user(self, user_id: int) -> User:
        user = self.user_store.get_by_id(user_id)
        if user is None:
            raise NotFound()
        return user
