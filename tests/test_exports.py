import unittest

import wsbridge
import wsbridge.asyncio.client
import wsbridge.channel
import wsbridge.codes
import wsbridge.connection
import wsbridge.events
import wsbridge.exceptions
import wsbridge.fake
import wsbridge.state
import wsbridge.typing


combined_exports = [
    name
    for name in (
        []
        + wsbridge.asyncio.client.__all__
        + wsbridge.channel.__all__
        + wsbridge.codes.__all__
        + wsbridge.connection.__all__
        + wsbridge.events.__all__
        + wsbridge.exceptions.__all__
        + wsbridge.fake.__all__
        + wsbridge.state.__all__
        + wsbridge.typing.__all__
    )
    if not name.isupper()  # filter out constants
]


class ExportsTests(unittest.TestCase):
    def test_top_level_module_reexports_submodule_exports(self):
        self.assertEqual(
            set(combined_exports),
            set(wsbridge.__all__),
        )

    def test_submodule_exports_are_globally_unique(self):
        self.assertEqual(
            len(set(combined_exports)),
            len(combined_exports),
        )

    def test_top_level_names_resolve_to_submodule_objects(self):
        self.assertIs(wsbridge.fakes, wsbridge.fake.fakes)
        self.assertIs(wsbridge.connect, wsbridge.asyncio.client.connect)
        self.assertIs(wsbridge.CloseCode, wsbridge.codes.CloseCode)
