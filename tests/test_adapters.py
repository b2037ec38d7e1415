import unittest

from rpc_health.core import adapters
from rpc_health.core.models import BlockObservation, Layer, Sample


class TestHexAndErrorCodes(unittest.TestCase):
    def test_parse_hex_quantity(self):
        self.assertEqual(adapters.parse_hex_quantity("0x1a"), 26)
        self.assertEqual(adapters.parse_hex_quantity(" 0x0 "), 0)
        self.assertEqual(adapters.parse_hex_quantity(5), 5)
        self.assertIsNone(adapters.parse_hex_quantity("0x"))
        self.assertIsNone(adapters.parse_hex_quantity("null"))
        self.assertIsNone(adapters.parse_hex_quantity(None))
        self.assertIsNone(adapters.parse_hex_quantity(True))

    def test_parse_error_code(self):
        self.assertEqual(adapters.parse_error_code("-32005"), -32005)
        self.assertEqual(adapters.parse_error_code(429), 429)
        self.assertIsNone(adapters.parse_error_code("busy"))

    def test_rpc_error_code(self):
        body = {"jsonrpc": "2.0", "id": 1, "error": {"code": -32005, "message": "limit exceeded"}}
        self.assertEqual(adapters.rpc_error_code(body), -32005)
        self.assertIsNone(adapters.rpc_error_code({"jsonrpc": "2.0", "id": 1, "result": "0x1"}))
        self.assertIsNone(adapters.rpc_error_code("Too Many Requests"))

    def test_beacon_error_code(self):
        self.assertEqual(adapters.beacon_error_code({"code": 429, "message": "Too many requests"}), 429)
        self.assertIsNone(adapters.beacon_error_code({"data": {"is_syncing": False}}))


class TestToSample(unittest.TestCase):
    def test_curl_style_strings(self):
        self.assertEqual(adapters.to_sample("200", "0.012"), Sample(0.012, 200, None))

    def test_transport_failure(self):
        sample = adapters.to_sample("000", "0")
        self.assertIsNone(sample.http_status)
        self.assertEqual(sample.elapsed_seconds, 0.0)
        self.assertFalse(sample.succeeded)

    def test_error_code_by_layer(self):
        consensus = adapters.to_sample(503, 0.5, {"code": 503, "message": "busy"}, Layer.CONSENSUS)
        self.assertEqual(consensus.rpc_error_code, 503)
        execution = adapters.to_sample(200, 0.5, {"error": {"code": -32029}})
        self.assertEqual(execution.rpc_error_code, -32029)

    def test_bad_elapsed_is_zero(self):
        self.assertEqual(adapters.to_sample(200, "abc").elapsed_seconds, 0.0)
        self.assertEqual(adapters.to_sample(200, None).elapsed_seconds, 0.0)
        self.assertEqual(adapters.to_sample(200, float("nan")).elapsed_seconds, 0.0)
        self.assertEqual(adapters.to_sample(200, "inf").elapsed_seconds, 0.0)


class TestBlocks(unittest.TestCase):
    def test_block_observation(self):
        payload = {"jsonrpc": "2.0", "id": 1, "result": {"number": "0x10", "timestamp": "0x64"}}
        block = adapters.block_observation(payload, now=110)
        self.assertEqual(block, BlockObservation(16, 100, 10))
        self.assertTrue(block.valid)

    def test_missing_block(self):
        self.assertFalse(adapters.block_observation({"result": None}, now=110).valid)
        self.assertFalse(adapters.block_observation({"result": {"number": "null"}}, now=110).valid)
        self.assertEqual(adapters.block_observation("garbage", now=1), BlockObservation.missing())

    def test_average_block_time(self):
        current = BlockObservation.observed(20, 1120, now=1125)
        previous = BlockObservation.observed(10, 1000, now=1125)
        self.assertAlmostEqual(adapters.average_block_time(current, previous), 12.0)
        self.assertIsNone(adapters.average_block_time(previous, current))
        self.assertIsNone(adapters.average_block_time(current, current))
        self.assertIsNone(adapters.average_block_time(current, BlockObservation.missing()))


class TestBeaconPayloads(unittest.TestCase):
    def test_beacon_slot(self):
        payload = {"data": {"root": "0xabc", "header": {"message": {"slot": "8123456"}}}}
        self.assertEqual(adapters.beacon_slot(payload), "8123456")
        self.assertIsNone(adapters.beacon_slot({"code": 404, "message": "not found"}))

    def test_sync_state(self):
        self.assertFalse(adapters.sync_state({"data": {"is_syncing": False}}))
        self.assertTrue(adapters.sync_state({"data": {"is_syncing": "true"}}))
        self.assertIsNone(adapters.sync_state({}))

    def test_node_identity(self):
        identity = adapters.node_identity({"data": {"client_name": "lighthouse", "peer_count": "72"}})
        self.assertEqual(identity, {"client_name": "lighthouse", "peer_count": 72})
        self.assertEqual(adapters.node_identity(None), {"client_name": None, "peer_count": None})

    def test_chain_info(self):
        self.assertEqual(adapters.chain_id({"result": "0x1"}), 1)
        self.assertIsNone(adapters.chain_id({"result": None}))
        self.assertEqual(adapters.client_version({"result": "Geth/v1.14.0"}), "Geth/v1.14.0")
        self.assertIsNone(adapters.client_version({"result": "null"}))


if __name__ == '__main__':
    unittest.main()
