import logging

from livetv.log import LOGGER_NAME, setup_logging
from livetv.settings import DEFAULT_EPG_CHUNK_SIZE, DEFAULT_USER_AGENT, Settings


class TestSettings:
    def test_defaults(self, monkeypatch, tmp_path):
        for name in ["LIVETV_USER_AGENT", "LIVETV_HTTP_TIMEOUT", "LIVETV_EPG_CHUNK_SIZE", "LIVETV_LOG_LEVEL"]:
            monkeypatch.delenv(name, raising=False)
        monkeypatch.setenv("LIVETV_HOME", str(tmp_path))

        s = Settings.from_env()
        assert s.data_dir == tmp_path
        assert s.sources_file == tmp_path / "sources.json"
        assert s.user_agent == DEFAULT_USER_AGENT
        assert s.http_timeout is None
        assert s.epg_chunk_size == DEFAULT_EPG_CHUNK_SIZE
        assert s.log_level == logging.INFO

    def test_env_overrides_and_bad_values(self, monkeypatch):
        monkeypatch.setenv("LIVETV_USER_AGENT", "Player/9")
        monkeypatch.setenv("LIVETV_HTTP_TIMEOUT", "2.5")
        monkeypatch.setenv("LIVETV_EPG_CHUNK_SIZE", "many")
        monkeypatch.setenv("LIVETV_LOG_LEVEL", "debug")
        s = Settings.from_env()
        assert (s.user_agent, s.http_timeout, s.epg_chunk_size, s.log_level) == (
            "Player/9",
            2.5,
            DEFAULT_EPG_CHUNK_SIZE,
            logging.DEBUG,
        )

        monkeypatch.setenv("LIVETV_HTTP_TIMEOUT", "soon")
        monkeypatch.setenv("LIVETV_LOG_LEVEL", "LOUD")
        s = Settings.from_env()
        assert s.http_timeout is None
        assert s.log_level == logging.INFO


class TestSetupLogging:
    def test_file_handler_is_added_once(self, tmp_path):
        logger = logging.getLogger(LOGGER_NAME)
        saved = list(logger.handlers)
        logger.handlers.clear()
        try:
            setup_logging(logging.DEBUG, tmp_path / "logs" / "livetv.log")
            setup_logging(logging.WARNING, tmp_path / "logs" / "livetv.log")

            assert len(logger.handlers) == 1
            assert logger.level == logging.WARNING
            logging.getLogger("livetv.test").warning("hello")
            logger.handlers[0].flush()
            assert "hello" in (tmp_path / "logs" / "livetv.log").read_text(encoding="utf-8")
        finally:
            for h in logger.handlers:
                h.close()
            logger.handlers[:] = saved
            logger.setLevel(logging.NOTSET)
