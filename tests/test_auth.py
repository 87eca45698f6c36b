import unittest

from coordinator.services.auth import (
    LoginRateLimiter,
    extract_bearer_token,
    get_access_codes,
    is_valid_code,
)


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


class TestAccessCodes(unittest.TestCase):
    def test_comma_separated_list_is_trimmed(self):
        config = {"ACCESS_CODES": " alpha, beta ,,gamma ", "ADMIN_ACCESS_CODE": None}
        self.assertEqual(get_access_codes(config), ["alpha", "beta", "gamma"])

    def test_legacy_code_is_appended_once(self):
        self.assertEqual(get_access_codes({"ACCESS_CODES": "alpha", "ADMIN_ACCESS_CODE": "legacy"}), ["alpha", "legacy"])
        self.assertEqual(get_access_codes({"ACCESS_CODES": "alpha", "ADMIN_ACCESS_CODE": "alpha"}), ["alpha"])
        self.assertEqual(get_access_codes({"ADMIN_ACCESS_CODE": "legacy"}), ["legacy"])

    def test_no_codes_configured(self):
        self.assertEqual(get_access_codes({}), [])
        self.assertEqual(get_access_codes({"ACCESS_CODES": " , ", "ADMIN_ACCESS_CODE": ""}), [])

    def test_code_valid_only_when_in_allow_list(self):
        codes = ["alpha", "beta"]
        self.assertTrue(is_valid_code("alpha", codes))
        self.assertTrue(is_valid_code("beta", codes))
        self.assertFalse(is_valid_code("gamma", codes))
        self.assertFalse(is_valid_code("Alpha", codes))
        self.assertFalse(is_valid_code("", codes))
        self.assertFalse(is_valid_code(None, codes))
        self.assertFalse(is_valid_code("alpha", []))

    def test_extract_bearer_token(self):
        self.assertEqual(extract_bearer_token("Bearer alpha"), "alpha")
        self.assertEqual(extract_bearer_token("bearer alpha"), "alpha")
        self.assertEqual(extract_bearer_token("alpha"), "alpha")
        self.assertEqual(extract_bearer_token(None), "")
        self.assertEqual(extract_bearer_token(""), "")


class TestLoginRateLimiter(unittest.TestCase):
    def setUp(self):
        self.clock = FakeClock()
        self.limiter = LoginRateLimiter(max_attempts=5, lockout_seconds=300, clock=self.clock)

    def test_lockout_after_five_failures(self):
        for expected_left in (4, 3, 2, 1):
            self.assertEqual(self.limiter.check("10.0.0.1"), (True, 0))
            self.assertEqual(self.limiter.register_failure("10.0.0.1"), expected_left)

        self.assertEqual(self.limiter.register_failure("10.0.0.1"), 0)
        allowed, retry_in = self.limiter.check("10.0.0.1")
        self.assertFalse(allowed)
        self.assertEqual(retry_in, 300)

        self.clock.now += 299.5
        allowed, retry_in = self.limiter.check("10.0.0.1")
        self.assertFalse(allowed)
        self.assertEqual(retry_in, 1)

    def test_lockout_expires_and_counter_resets(self):
        for _ in range(5):
            self.limiter.register_failure("10.0.0.1")
        self.clock.now += 300

        self.assertEqual(self.limiter.check("10.0.0.1"), (True, 0))
        self.assertEqual(self.limiter.register_failure("10.0.0.1"), 4)

    def test_success_resets_counter(self):
        for _ in range(4):
            self.limiter.register_failure("10.0.0.1")
        self.limiter.register_success("10.0.0.1")

        for _ in range(4):
            self.limiter.register_failure("10.0.0.1")
        self.assertEqual(self.limiter.check("10.0.0.1"), (True, 0))

    def test_addresses_are_tracked_separately(self):
        for _ in range(5):
            self.limiter.register_failure("10.0.0.1")

        self.assertFalse(self.limiter.check("10.0.0.1")[0])
        self.assertEqual(self.limiter.check("10.0.0.2"), (True, 0))

    def test_reset_clears_all_state(self):
        for _ in range(5):
            self.limiter.register_failure("10.0.0.1")
        self.limiter.reset()
        self.assertEqual(self.limiter.check("10.0.0.1"), (True, 0))


if __name__ == "__main__":
    unittest.main()
