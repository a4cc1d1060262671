#  Tapmouse - open-source remote pointer for the local network.
#  Copyright (c) 2026 Federico Izzi.
#
#  This program is free software: you can redistribute it and/or modify
#  it under the terms of the GNU General Public License as published by
#  the Free Software Foundation, either version 3 of the License, or
#  (at your option) any later version.
#
#  This program is distributed in the hope that it will be useful,
#  but WITHOUT ANY WARRANTY; without even the implied warranty of
#  MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
#  GNU General Public License for more details.
#
#  You should have received a copy of the GNU General Public License
#  along with this program.  If not, see <https://www.gnu.org/licenses/>.
#

import json
import os

import pytest

from config import ApplicationConfig, ClientConfig, ServerConfig, _PersistentConfig
from model.connection import CONTROL_PORT
from utils.logging import Logger


# ============================================================================
# Test ApplicationConfig
# ============================================================================


class TestApplicationConfig:
    """Test ApplicationConfig class."""

    def test_application_config_initialization(self):
        """Test that ApplicationConfig initializes with default values."""
        config = ApplicationConfig()

        assert config.app_name == "Tapmouse"
        assert config.main_path == ""
        assert config.config_path == "config/"
        assert config.DEFAULT_PORT == CONTROL_PORT == 6886
        assert config.DEFAULT_PROBE_TIMEOUT == 2.0
        assert (config.DEFAULT_SCAN_START, config.DEFAULT_SCAN_END) == (1, 252)

    def test_application_config_post_init(self):
        """Test that __post_init__ sets config_files correctly."""
        config = ApplicationConfig()

        assert config.config_files["server"] == "server_config.json"
        assert config.config_files["client"] == "client_config.json"

    def test_set_save_path_creates_directory(self, temp_dir):
        """Test that set_save_path creates directory if it doesn't exist."""
        config = ApplicationConfig()
        new_path = os.path.join(str(temp_dir), "new_config_dir")

        assert not os.path.exists(new_path)

        config.set_save_path(new_path)

        assert os.path.exists(new_path)
        assert config.get_save_path() == new_path

    def test_get_config_dir(self, temp_dir):
        """Test get_config_dir returns correct path."""
        config = ApplicationConfig()
        config.set_save_path(str(temp_dir))

        assert config.get_config_dir() == os.path.join(str(temp_dir), "config/")

    def test_persistent_base_is_abstract(self):
        """Test the shared persistence base cannot be used without a schema."""
        with pytest.raises(TypeError):
            _PersistentConfig("base.json")


# ============================================================================
# Test ServerConfig
# ============================================================================


class TestServerConfig:
    """Test ServerConfig defaults, setters and persistence."""

    def test_server_config_default_initialization(self, server_config):
        assert server_config.host == "0.0.0.0"
        assert server_config.port == CONTROL_PORT
        assert server_config.read_timeout == ServerConfig.DEFAULT_READ_TIMEOUT
        assert server_config.log_level == Logger.INFO
        assert server_config.log_to_file is False

    def test_config_file_under_config_dir(self, server_config, app_config):
        assert server_config.config_file == os.path.join(
            app_config.get_config_dir(), "server_config.json"
        )

    def test_set_connection_params_ignores_none(self, server_config):
        server_config.set_connection_params(port=7000)

        assert server_config.port == 7000
        assert server_config.host == "0.0.0.0"

    def test_set_logging(self, server_config):
        server_config.set_logging(level=Logger.DEBUG, log_to_file=True, log_file_path="x.log")

        assert server_config.log_level == Logger.DEBUG
        assert server_config.log_to_file is True
        assert server_config.log_file_path == "x.log"

    @pytest.mark.anyio
    async def test_save_and_load(self, server_config, app_config):
        server_config.set_connection_params(host="127.0.0.1", port=7001, read_timeout=1.5)
        await server_config.save()

        with open(server_config.config_file) as f:
            assert json.load(f)["port"] == 7001
        assert not os.path.exists(server_config.config_file + ".tmp")

        loaded = ServerConfig(app_config)
        assert await loaded.load() is True
        assert loaded.host == "127.0.0.1"
        assert loaded.port == 7001
        assert loaded.read_timeout == 1.5

    def test_sync_load_missing_file(self, server_config):
        assert server_config.sync_load() is False

    def test_sync_load_corrupted_file(self, server_config):
        os.makedirs(os.path.dirname(server_config.config_file), exist_ok=True)
        with open(server_config.config_file, "w") as f:
            f.write("{ not json")

        assert server_config.sync_load() is False
        assert server_config.port == CONTROL_PORT


# ============================================================================
# Test ClientConfig
# ============================================================================


class TestClientConfig:
    """Test ClientConfig defaults, setters and persistence."""

    def test_client_config_defaults(self, client_config):
        assert client_config.server_host is None
        assert client_config.port == CONTROL_PORT
        assert client_config.probe_timeout == 2.0
        assert client_config.scan_base == "192.168.1"
        assert client_config.move_speed == 1.0

    @pytest.mark.parametrize("speed, expected", [(0.2, 1.0), (3, 3.0), (9, 5.0)])
    def test_move_speed_clamped(self, client_config, speed, expected):
        client_config.move_speed = speed
        assert client_config.move_speed == expected

    def test_set_scan_range(self, client_config):
        client_config.set_scan_range(base="10.0.0", end=20)

        assert client_config.scan_base == "10.0.0"
        assert client_config.scan_start == 1
        assert client_config.scan_end == 20

    @pytest.mark.anyio
    async def test_last_host_persisted(self, client_config, app_config):
        client_config.set_server_host("192.168.1.77")
        client_config.move_speed = 4
        await client_config.save()

        loaded = ClientConfig(app_config)
        assert loaded.sync_load() is True
        assert loaded.server_host == "192.168.1.77"
        assert loaded.move_speed == 4.0

    @pytest.mark.anyio
    async def test_save_to_explicit_path(self, client_config, temp_dir):
        path = os.path.join(str(temp_dir), "nested", "client.json")
        await client_config.save(path)

        assert os.path.exists(path)
