import asyncio
import unittest

from auth.constants import AuthErrorDetails
from auth.exceptions import (
    ConflictError,
    ForbiddenError,
    TransientError,
    UnauthenticatedError,
    ValidationFailedError,
)
from auth.security import TokenCodec, TokenKind
from auth.services.access_guard import AccessGuard
from auth.services.auth_service import AuthService
from auth.services.credential_service import CredentialVerifier
from auth.stores.memory_store import MemoryRefreshTokenStore, MemoryUserStore
from tests.support import STRONG_PASSWORD, FakeClock, make_config

REFRESH_TTL = 7 * 24 * 60 * 60


class SlowUserStore(MemoryUserStore):
    async def get_by_email(self, email):
        await asyncio.sleep(1)
        return await super().get_by_email(email)


class FailingRemoveStore(MemoryRefreshTokenStore):
    async def remove(self, user_id, token):
        raise TransientError()


class AuthServiceTestCase(unittest.IsolatedAsyncioTestCase):
    def build(self, config=None, users=None, tokens=None):
        self.config = config or make_config()
        self.clock = FakeClock()
        self.codec = TokenCodec(self.config, clock=self.clock)
        self.users = users or MemoryUserStore()
        self.tokens = tokens or MemoryRefreshTokenStore()
        self.service = AuthService(
            self.users,
            self.tokens,
            CredentialVerifier(self.users, self.config),
            self.codec,
            self.config,
        )

    async def asyncSetUp(self):
        self.build()

    async def register(self, email="bob@example.com"):
        pair = await self.service.register(email, STRONG_PASSWORD)
        user_id = self.codec.verify(pair.access_token, TokenKind.ACCESS).subject_id
        return user_id, pair


class TestRegisterAndLogin(AuthServiceTestCase):
    async def test_register_issues_pair_and_records_refresh_token(self):
        user_id, pair = await self.register()

        self.assertEqual(self.codec.verify(pair.refresh_token, TokenKind.REFRESH).subject_id, user_id)
        self.assertEqual(await self.tokens.list_tokens(user_id), [pair.refresh_token])
        user = await self.users.get_by_id(user_id)
        self.assertNotEqual(user["hashed_password"], STRONG_PASSWORD)

    async def test_register_rejects_existing_email_case_insensitively(self):
        await self.register("bob@example.com")

        with self.assertRaises(ConflictError) as ctx:
            await self.service.register("  BOB@example.com", STRONG_PASSWORD)
        self.assertEqual(ctx.exception.message, "User already exists")
        self.assertEqual(ctx.exception.status_code, 400)

    async def test_register_reports_all_validation_errors(self):
        with self.assertRaises(ValidationFailedError) as ctx:
            await self.service.register("not-an-email", "short")

        self.assertIn(AuthErrorDetails.EMAIL_INVALID.value, ctx.exception.errors)
        self.assertGreater(len(ctx.exception.errors), 1)

    async def test_login_opens_an_additional_session(self):
        user_id, first = await self.register()

        second = await self.service.login("Bob@Example.com", STRONG_PASSWORD)

        self.assertEqual(
            set(await self.tokens.list_tokens(user_id)),
            {first.refresh_token, second.refresh_token},
        )

    async def test_login_failures_are_indistinguishable(self):
        await self.register()

        with self.assertRaises(UnauthenticatedError) as wrong_password:
            await self.service.login("bob@example.com", "Wr0ng!Pass")
        with self.assertRaises(UnauthenticatedError) as unknown_email:
            await self.service.login("nobody@example.com", STRONG_PASSWORD)

        for ctx in (wrong_password, unknown_email):
            self.assertEqual(type(ctx.exception), UnauthenticatedError)
            self.assertEqual(ctx.exception.message, "Invalid credentials")
            self.assertEqual(ctx.exception.status_code, 401)

    async def test_login_prunes_expired_tokens(self):
        user_id, first = await self.register()

        self.clock.advance(REFRESH_TTL)
        second = await self.service.login("bob@example.com", STRONG_PASSWORD)

        self.assertEqual(await self.tokens.list_tokens(user_id), [second.refresh_token])

    async def test_store_timeout_is_transient_not_an_auth_failure(self):
        self.build(config=make_config(STORE_TIMEOUT_SECONDS=0.05), users=SlowUserStore())

        with self.assertRaises(TransientError) as ctx:
            await self.service.login("bob@example.com", STRONG_PASSWORD)
        self.assertEqual(ctx.exception.status_code, 503)
        self.assertEqual(ctx.exception.message, "Service temporarily unavailable")


class TestRefresh(AuthServiceTestCase):
    async def test_refresh_rotates_the_token(self):
        user_id, pair = await self.register()

        rotated = await self.service.refresh(pair.refresh_token)

        self.assertNotEqual(rotated.refresh_token, pair.refresh_token)
        self.assertEqual(await self.tokens.list_tokens(user_id), [rotated.refresh_token])
        self.assertEqual(self.codec.verify(rotated.access_token, TokenKind.ACCESS).subject_id, user_id)

    async def test_replayed_token_is_rejected(self):
        user_id, pair = await self.register()
        rotated = await self.service.refresh(pair.refresh_token)

        with self.assertRaises(UnauthenticatedError) as ctx:
            await self.service.refresh(pair.refresh_token)
        self.assertEqual(ctx.exception.message, "Invalid refresh token")
        # The successor stays valid.
        self.assertEqual(await self.tokens.list_tokens(user_id), [rotated.refresh_token])

    async def test_concurrent_refreshes_have_exactly_one_winner(self):
        user_id, pair = await self.register()

        results = await asyncio.gather(
            self.service.refresh(pair.refresh_token),
            self.service.refresh(pair.refresh_token),
            return_exceptions=True,
        )

        winners = [r for r in results if not isinstance(r, BaseException)]
        losers = [r for r in results if isinstance(r, UnauthenticatedError)]
        self.assertEqual(len(winners), 1)
        self.assertEqual(len(losers), 1)
        self.assertEqual(await self.tokens.list_tokens(user_id), [winners[0].refresh_token])

    async def test_missing_or_malformed_tokens_are_rejected(self):
        _, pair = await self.register()

        for bad in (None, "", "garbage", pair.access_token):
            with self.subTest(token=bad):
                with self.assertRaises(UnauthenticatedError) as ctx:
                    await self.service.refresh(bad)
                self.assertEqual(ctx.exception.message, "Invalid refresh token")

    async def test_expired_token_is_rejected_and_dropped_from_ledger(self):
        user_id, pair = await self.register()

        self.clock.advance(REFRESH_TTL)
        with self.assertRaises(UnauthenticatedError):
            await self.service.refresh(pair.refresh_token)

        self.assertEqual(await self.tokens.list_tokens(user_id), [])

    async def test_token_for_unknown_user_is_rejected(self):
        orphan = self.codec.issue("no-such-user", TokenKind.REFRESH)
        await self.tokens.add("no-such-user", orphan.token, orphan.expires_at)

        with self.assertRaises(UnauthenticatedError):
            await self.service.refresh(orphan.token)

    async def test_ledgers_of_different_users_are_independent(self):
        alice_id, alice = await self.register("alice@example.com")
        bob_id, bob = await self.register("bob@example.com")

        await asyncio.gather(
            self.service.refresh(alice.refresh_token),
            self.service.logout(bob_id, bob.refresh_token),
        )

        self.assertEqual(len(await self.tokens.list_tokens(alice_id)), 1)
        self.assertEqual(await self.tokens.list_tokens(bob_id), [])


class TestLogout(AuthServiceTestCase):
    async def test_logout_revokes_the_token(self):
        user_id, pair = await self.register()

        await self.service.logout(user_id, pair.refresh_token)

        self.assertEqual(await self.tokens.list_tokens(user_id), [])
        with self.assertRaises(UnauthenticatedError):
            await self.service.refresh(pair.refresh_token)

    async def test_logout_is_idempotent(self):
        user_id, pair = await self.register()

        await self.service.logout(user_id, pair.refresh_token)
        await self.service.logout(user_id, pair.refresh_token)
        await self.service.logout(user_id, None)

        self.assertEqual(await self.tokens.list_tokens(user_id), [])

    async def test_logout_cannot_revoke_another_users_token(self):
        alice_id, alice = await self.register("alice@example.com")
        bob_id, _ = await self.register("bob@example.com")

        await self.service.logout(bob_id, alice.refresh_token)

        self.assertEqual(await self.tokens.list_tokens(alice_id), [alice.refresh_token])

    async def test_logout_swallows_store_failures(self):
        self.build(tokens=FailingRemoveStore())
        user_id, pair = await self.register()

        await self.service.logout(user_id, pair.refresh_token)


class TestAccessGuard(unittest.TestCase):
    def setUp(self):
        self.clock = FakeClock()
        self.codec = TokenCodec(make_config(), clock=self.clock)
        self.guard = AccessGuard(self.codec)

    def test_valid_token_yields_subject(self):
        self.assertEqual(self.guard.authenticate(self.codec.issue_access("user-1")), "user-1")

    def test_missing_token_is_unauthenticated(self):
        for token in (None, ""):
            with self.assertRaises(UnauthenticatedError) as ctx:
                self.guard.authenticate(token)
            self.assertEqual(ctx.exception.status_code, 401)

    def test_invalid_tokens_are_forbidden(self):
        expired = self.codec.issue_access("user-1")
        refresh = self.codec.issue_refresh("user-1")
        self.clock.advance(15 * 60)

        for token in ("garbage", refresh, expired):
            with self.assertRaises(ForbiddenError) as ctx:
                self.guard.authenticate(token)
            self.assertEqual(ctx.exception.status_code, 403)


if __name__ == "__main__":
    unittest.main()
