import unittest

from fastapi.testclient import TestClient

from tradedesk.app import create_app
from tradedesk.config import Settings, get_settings
from tradedesk.db import InMemoryDbClient
from tradedesk.dependencies import get_db_client
from tradedesk.types import AppRole


class BackendApiTests(unittest.TestCase):
    def setUp(self):
        self.db = InMemoryDbClient(
            default_partner_link="https://fbs.com/partner-link",
            default_wallet_address="TBD_USDT_ADDRESS",
            default_bot_username="your_telegram_bot",
        )
        self.settings = Settings(jwt_secret_key="test-secret")
        app = create_app()
        app.dependency_overrides[get_db_client] = lambda: self.db
        app.dependency_overrides[get_settings] = lambda: self.settings
        self.client = TestClient(app)

    def register(self, email="jane@example.com", name="Jane", handle="@jane"):
        response = self.client.post(
            "/api/auth/sign-up",
            json={
                "full_name": name,
                "email": email,
                "telegram_handle": handle,
                "password": "hunter22",
                "confirm_password": "hunter22",
                "has_trading_account": "yes",
            },
        )
        self.assertEqual(response.status_code, 201, response.text)
        return response.json()["user_id"]

    def sign_in(self, email="jane@example.com") -> dict:
        response = self.client.post(
            "/api/auth/sign-in", json={"email": email, "password": "hunter22"}
        )
        self.assertEqual(response.status_code, 200, response.text)
        return {"Authorization": f"Bearer {response.json()['access_token']}"}

    def make_admin(self):
        user_id = self.register("admin@example.com", "Admin", "@admin")
        self.db.insert_role(user_id, AppRole.ADMIN)
        return user_id, self.sign_in("admin@example.com")

    def test_commission_scenario(self):
        user_id = self.register()
        self.assertEqual(self.db.get_profile_by_user(user_id).full_name, "Jane")
        self.assertEqual(self.db.get_profile_by_user(user_id).telegram_handle, "@jane")
        self.assertEqual([r.role for r in self.db.list_roles(user_id)], [AppRole.USER])

        headers = self.sign_in()
        created = self.client.post(
            "/api/dashboard/accounts",
            headers=headers,
            json={
                "account_id": "123",
                "password": "mt5-secret",
                "server": "Demo",
                "initial_deposit": 1000,
            },
        )
        self.assertEqual(created.status_code, 201, created.text)
        account = created.json()
        self.assertEqual(account["current_balance"], 1000)
        self.assertFalse(account["profit_target_reached"])
        self.assertFalse(account["commission_paid"])
        self.assertIsNone(account["password"])

        _, admin_headers = self.make_admin()
        updated = self.client.patch(
            f"/api/admin/accounts/{account['id']}",
            headers=admin_headers,
            json={"current_balance": 2000, "profit_target_reached": True},
        )
        self.assertEqual(updated.status_code, 200, updated.text)
        self.assertEqual(updated.json()["owner_name"], "Jane")

        dashboard = self.client.get("/api/dashboard", headers=headers).json()
        self.assertEqual(dashboard["accounts"][0]["badge"], "Commission Due")
        self.assertEqual(dashboard["accounts"][0]["commission_status"], "due")
        self.assertEqual(dashboard["accounts"][0]["commission_amount"], 500)
        self.assertEqual(dashboard["usdt_wallet_address"], "TBD_USDT_ADDRESS")
        self.assertEqual(dashboard["total_profit"], 1000)

        self.client.patch(
            f"/api/admin/accounts/{account['id']}",
            headers=admin_headers,
            json={"commission_paid": True},
        )
        dashboard = self.client.get("/api/dashboard", headers=headers).json()
        self.assertEqual(dashboard["accounts"][0]["badge"], "Commission Paid")

    def test_non_admin_cannot_update_balance(self):
        self.register()
        headers = self.sign_in()
        account = self.client.post(
            "/api/accounts",
            headers=headers,
            json={"account_id": "1", "password": "p", "server": "Demo", "initial_deposit": 50},
        ).json()
        response = self.client.patch(
            f"/api/accounts/{account['id']}",
            headers=headers,
            json={"current_balance": 99999},
        )
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json()["error"], "authorization_error")
        self.assertEqual(self.db.get_trading_account(account["id"]).current_balance, 50)

    def test_non_admin_sees_only_own_accounts(self):
        self.register()
        other_id = self.register("bob@example.com", "Bob", "@bob")
        jane = self.sign_in()
        bob = self.sign_in("bob@example.com")
        payload = {"account_id": "1", "password": "p", "server": "Demo", "initial_deposit": 10}
        self.client.post("/api/accounts", headers=jane, json=payload)
        self.client.post("/api/accounts", headers=bob, json=payload)

        listed = self.client.get("/api/accounts", headers=jane).json()
        self.assertEqual(len(listed), 1)
        denied = self.client.get("/api/accounts", headers=jane, params={"user_id": other_id})
        self.assertEqual(denied.status_code, 403)

    def test_insert_for_other_owner_rejected(self):
        self.register()
        other_id = self.register("bob@example.com", "Bob", "@bob")
        response = self.client.post(
            "/api/accounts",
            headers=self.sign_in(),
            params={"user_id": other_id},
            json={"account_id": "1", "password": "p", "server": "Demo", "initial_deposit": 10},
        )
        self.assertEqual(response.status_code, 403)
        self.assertEqual(self.db.list_trading_accounts(), [])

    def test_sign_up_validation(self):
        base = {
            "full_name": "Jane",
            "email": "jane@example.com",
            "telegram_handle": "@jane",
            "password": "hunter22",
            "confirm_password": "hunter22",
            "has_trading_account": "yes",
        }
        cases = [
            ({"full_name": ""}, "Please fill in all fields."),
            ({"confirm_password": "other"}, "Passwords do not match."),
            ({"password": "abc", "confirm_password": "abc"}, "at least 6 characters"),
            ({"has_trading_account": None}, "trading account"),
            ({"email": "not-an-email"}, "valid email"),
        ]
        for override, message in cases:
            response = self.client.post("/api/auth/sign-up", json={**base, **override})
            self.assertEqual(response.status_code, 400, override)
            self.assertIn(message, response.json()["message"])
        self.assertEqual(self.db.list_identities(), [])

    def test_sign_up_without_trading_account_returns_partner_link(self):
        response = self.client.post(
            "/api/auth/sign-up",
            json={
                "full_name": "Jane",
                "email": "jane@example.com",
                "telegram_handle": "@jane",
                "password": "hunter22",
                "confirm_password": "hunter22",
                "has_trading_account": "no",
            },
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "partner_redirect")
        self.assertEqual(response.json()["partner_link"], "https://fbs.com/partner-link")
        self.assertEqual(self.db.list_identities(), [])

    def test_duplicate_sign_up_conflicts(self):
        self.register()
        response = self.client.post(
            "/api/auth/sign-up",
            json={
                "full_name": "Jane",
                "email": "JANE@example.com",
                "telegram_handle": "@jane",
                "password": "hunter22",
                "confirm_password": "hunter22",
                "has_trading_account": "yes",
            },
        )
        self.assertEqual(response.status_code, 409)

    def test_account_validation(self):
        self.register()
        headers = self.sign_in()
        for body in (
            {"account_id": "", "password": "p", "server": "Demo", "initial_deposit": 10},
            {"account_id": "1", "password": "p", "server": "Demo"},
            {"account_id": "1", "password": "p", "server": "Demo", "initial_deposit": 0},
            {"account_id": "1", "password": "p", "server": "Demo", "initial_deposit": -5},
            {"account_id": "1", "password": "p", "server": "Demo", "initial_deposit": 100_000_000},
            {"account_id": "1", "password": "p", "server": "Demo", "initial_deposit": 1e9},
        ):
            response = self.client.post("/api/dashboard/accounts", headers=headers, json=body)
            self.assertEqual(response.status_code, 400, body)
        self.assertEqual(self.db.list_trading_accounts(), [])

    def test_balance_above_column_range_rejected(self):
        self.register()
        jane = self.sign_in()
        account = self.client.post(
            "/api/dashboard/accounts",
            headers=jane,
            json={"account_id": "1", "password": "p", "server": "Demo", "initial_deposit": 10},
        ).json()
        _, admin_headers = self.make_admin()
        response = self.client.patch(
            f"/api/admin/accounts/{account['id']}",
            headers=admin_headers,
            json={"current_balance": 1e8},
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "validation_error")
        self.assertEqual(self.db.get_trading_account(account["id"]).current_balance, 10)

    def test_malformed_body_uses_error_shape(self):
        response = self.client.post(
            "/api/auth/sign-up",
            json={
                "full_name": "Jane",
                "email": "jane@example.com",
                "telegram_handle": "@jane",
                "password": "hunter22",
                "confirm_password": "hunter22",
                "has_trading_account": "maybe",
            },
        )
        self.assertEqual(response.status_code, 400)
        body = response.json()
        self.assertEqual(body["error"], "validation_error")
        self.assertTrue(body["message"])
        self.assertNotIn("detail", body)
        self.assertEqual(self.db.list_identities(), [])

        self.register()
        bad_deposit = self.client.post(
            "/api/dashboard/accounts",
            headers=self.sign_in(),
            json={"account_id": "1", "password": "p", "server": "Demo", "initial_deposit": "abc"},
        )
        self.assertEqual(bad_deposit.status_code, 400)
        self.assertEqual(bad_deposit.json()["error"], "validation_error")

    def test_admin_insert_for_unknown_user_not_found(self):
        _, admin_headers = self.make_admin()
        response = self.client.post(
            "/api/accounts",
            headers=admin_headers,
            params={"user_id": "ghost"},
            json={"account_id": "1", "password": "p", "server": "Demo", "initial_deposit": 10},
        )
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["error"], "not_found")
        self.assertEqual(self.db.list_trading_accounts(), [])

    def test_auth_required_and_sign_out(self):
        self.assertEqual(self.client.get("/api/dashboard").status_code, 401)
        self.register()
        headers = self.sign_in()
        self.assertEqual(self.client.get("/api/auth/me", headers=headers).status_code, 200)
        out = self.client.post("/api/auth/sign-out", headers=headers, json={"scope": "global"})
        self.assertEqual(out.status_code, 200)
        again = self.client.get("/api/auth/me", headers=headers)
        self.assertEqual(again.status_code, 401)
        self.assertEqual(again.json()["error"], "authentication_error")

    def test_bad_credentials(self):
        self.register()
        response = self.client.post(
            "/api/auth/sign-in", json={"email": "jane@example.com", "password": "wrong-pass"}
        )
        self.assertEqual(response.status_code, 401)
        missing = self.client.post("/api/auth/sign-in", json={"email": "jane@example.com"})
        self.assertEqual(missing.status_code, 400)

    def test_me_reports_admin(self):
        self.register()
        me = self.client.get("/api/auth/me", headers=self.sign_in()).json()
        self.assertFalse(me["is_admin"])
        self.assertEqual(me["roles"], ["user"])
        self.assertEqual(me["profile"]["full_name"], "Jane")
        _, admin_headers = self.make_admin()
        admin_me = self.client.get("/api/auth/me", headers=admin_headers).json()
        self.assertTrue(admin_me["is_admin"])

    def test_settings_public_and_idempotent(self):
        first = self.client.get("/api/settings")
        second = self.client.get("/api/settings")
        self.assertEqual(first.status_code, 200)
        self.assertEqual(first.json(), second.json())
        landing = self.client.get("/api/landing").json()
        self.assertEqual(landing["telegram_bot_username"], "your_telegram_bot")

    def test_admin_panel_requires_admin(self):
        self.register()
        headers = self.sign_in()
        self.assertEqual(self.client.get("/api/admin", headers=headers).status_code, 403)
        self.assertEqual(
            self.client.put(
                "/api/admin/settings", headers=headers, json={"usdt_wallet_address": "X"}
            ).status_code,
            403,
        )

    def test_admin_overview(self):
        jane_id = self.register()
        jane = self.sign_in()
        account = self.client.post(
            "/api/dashboard/accounts",
            headers=jane,
            json={"account_id": "9", "password": "mt5", "server": "Live", "initial_deposit": 100},
        ).json()
        _, admin_headers = self.make_admin()
        self.client.patch(
            f"/api/accounts/{account['id']}",
            headers=admin_headers,
            json={"commission_paid": True},
        )
        self.client.patch(
            f"/api/accounts/{account['id']}",
            headers=admin_headers,
            json={"current_balance": 250},
        )

        overview = self.client.get("/api/admin", headers=admin_headers).json()
        self.assertEqual(overview["total_users"], 2)
        self.assertEqual(overview["total_accounts"], 1)
        self.assertEqual(overview["total_balance"], 250)
        self.assertEqual(overview["accounts_needing_commission"], 0)
        self.assertEqual(overview["accounts"][0]["password"], "mt5")
        self.assertEqual(overview["accounts"][0]["owner_name"], "Jane")
        self.assertTrue(overview["accounts"][0]["target_suggested"])
        self.assertEqual(len(overview["inconsistencies"]), 1)
        emails = {u["id"]: u["email"] for u in overview["users"]}
        self.assertEqual(emails[jane_id], "jane@example.com")

    def test_profit_target_latch_over_http(self):
        self.register()
        jane = self.sign_in()
        account = self.client.post(
            "/api/dashboard/accounts",
            headers=jane,
            json={"account_id": "9", "password": "mt5", "server": "Live", "initial_deposit": 100},
        ).json()
        _, admin_headers = self.make_admin()
        url = f"/api/admin/accounts/{account['id']}"
        self.client.patch(url, headers=admin_headers, json={"profit_target_reached": True})
        response = self.client.patch(url, headers=admin_headers, json={"profit_target_reached": False})
        self.assertEqual(response.status_code, 400)

    def test_admin_settings_and_roles(self):
        jane_id = self.register()
        _, admin_headers = self.make_admin()
        updated = self.client.put(
            "/api/admin/settings",
            headers=admin_headers,
            json={"usdt_wallet_address": "TWALLET"},
        )
        self.assertEqual(updated.status_code, 200)
        self.assertEqual(self.client.get("/api/settings").json()["usdt_wallet_address"], "TWALLET")

        granted = self.client.post(
            "/api/admin/roles", headers=admin_headers, json={"user_id": jane_id, "role": "admin"}
        )
        self.assertEqual(granted.status_code, 201)
        dup = self.client.post(
            "/api/admin/roles", headers=admin_headers, json={"user_id": jane_id, "role": "admin"}
        )
        self.assertEqual(dup.status_code, 409)
        revoked = self.client.delete(f"/api/admin/roles/{jane_id}/admin", headers=admin_headers)
        self.assertEqual(revoked.status_code, 204)

    def test_profile_update(self):
        jane_id = self.register()
        bob_id = self.register("bob@example.com", "Bob", "@bob")
        headers = self.sign_in()
        ok = self.client.patch(
            f"/api/profiles/{jane_id}", headers=headers, json={"telegram_handle": "@jane2"}
        )
        self.assertEqual(ok.status_code, 200)
        self.assertEqual(ok.json()["telegram_handle"], "@jane2")
        denied = self.client.patch(
            f"/api/profiles/{bob_id}", headers=headers, json={"full_name": "X"}
        )
        self.assertEqual(denied.status_code, 403)


if __name__ == "__main__":
    unittest.main()
