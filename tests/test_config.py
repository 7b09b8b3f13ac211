#!/usr/bin/env python3
"""
Unit tests for server/utils/config.py and the server command line.
"""

import unittest

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from common.constants import DEFAULT_PORT, BROADCAST_QUEUE_SIZE, FANOUT_LOCKED
from server.main_server import build_parser, config_from_args
from server.utils.config import ServerConfig


class TestServerConfig(unittest.TestCase):
    """Test cases for ServerConfig."""

    def test_defaults(self):
        config = ServerConfig().validate()

        self.assertEqual(config.get_connection_info(), {'host': '0.0.0.0', 'port': DEFAULT_PORT})
        self.assertEqual(config.get_hub_settings()['queue_size'], BROADCAST_QUEUE_SIZE)
        self.assertEqual(config.get_hub_settings()['fanout_policy'], FANOUT_LOCKED)
        self.assertEqual(config.get_log_settings(), {'logs_dir': None, 'log_level': 'INFO'})

    def test_log_level_is_normalized(self):
        self.assertEqual(ServerConfig(log_level='debug').validate().log_level, 'DEBUG')

    def test_invalid_settings_are_rejected(self):
        cases = {
            'port': {'port': 70000},
            'queue_size': {'queue_size': -1},
            'fanout_policy': {'fanout_policy': 'shuffle'},
            'write_timeout': {'write_timeout': 0},
            'max_line_length': {'max_line_length': 0},
            'log_level': {'log_level': 'chatty'},
        }
        for name, kwargs in cases.items():
            with self.subTest(setting=name):
                with self.assertRaises(ValueError):
                    ServerConfig(**kwargs).validate()


class TestServerArguments(unittest.TestCase):
    """Test cases for the server argument parser."""

    def test_arguments_map_to_config(self):
        args = build_parser().parse_args([
            '--host', '127.0.0.1', '--port', '9001', '--queue-size', '0',
            '--fanout-policy', 'snapshot', '--write-timeout', '0.5',
            '--max-line-length', '128', '--log-level', 'warning'
        ])

        config = config_from_args(args)

        self.assertEqual(config.host, '127.0.0.1')
        self.assertEqual(config.port, 9001)
        self.assertEqual(config.queue_size, 0)
        self.assertEqual(config.fanout_policy, 'snapshot')
        self.assertEqual(config.write_timeout, 0.5)
        self.assertEqual(config.max_line_length, 128)
        self.assertEqual(config.log_level, 'WARNING')

    def test_unknown_policy_is_a_usage_error(self):
        with self.assertRaises(SystemExit):
            build_parser().parse_args(['--fanout-policy', 'shuffle'])


if __name__ == '__main__':
    unittest.main()
