"""
Модульные тесты для barcodeforge/__init__.py
Тестирует инициализацию пакета, конфигурацию, логирование и публичный API.
"""

import json
import logging
import tempfile
from pathlib import Path
from unittest import mock

import pytest

import barcodeforge
from barcodeforge.model.config import EncodingConfiguration
from barcodeforge.model.enums import QRErrorCorrection, SymbologyKind


class TestVersionMetadata:
    """Тестирование метаданных версии и констант."""

    def test_version_format(self) -> None:
        """Проверить, что __version__ следует семантическому версионированию."""
        import re

        assert re.match(r"^\d+\.\d+\.\d+$", barcodeforge.__version__)

    def test_version_components(self) -> None:
        """Проверить, что компоненты версии соответствуют __version__."""
        expected = (
            f"{barcodeforge.VERSION_MAJOR}."
            f"{barcodeforge.VERSION_MINOR}."
            f"{barcodeforge.VERSION_PATCH}"
        )
        assert barcodeforge.__version__ == expected

    def test_metadata_attributes(self) -> None:
        """Проверить, что атрибуты метаданных являются непустыми строками."""
        for name in ("__author__", "__description__", "__license__", "__python_requires__"):
            value = getattr(barcodeforge, name)
            assert isinstance(value, str) and value, f"{name} должен быть непустой строкой"


class TestPublicAPI:
    """Тестирование экспортов публичного API."""

    def test_all_exports_exist(self) -> None:
        """Проверить, что все имена в __all__ действительно существуют в модуле."""
        for name in barcodeforge.__all__:
            assert hasattr(barcodeforge, name), f"Имя '{name}' из __all__ не существует в модуле"

    def test_no_duplicate_exports(self) -> None:
        """Проверить, что __all__ не содержит дубликатов."""
        assert len(barcodeforge.__all__) == len(set(barcodeforge.__all__))

    def test_engine_exported(self) -> None:
        """Проверить, что фасад движка доступен с верхнего уровня."""
        with barcodeforge.BarcodeEngine(barcodeforge.SymbologyKind.QR) as engine:
            assert engine.draw_2d("barcodeforge", 120)


class TestLogging:
    """Тестирование конфигурации логирования."""

    def test_get_logger_name_format(self) -> None:
        """Проверить, что имена логгеров правильно отформатированы."""
        assert barcodeforge.get_logger("test_module").name == "barcodeforge.test_module"

    def test_get_logger_with_qualified_name(self) -> None:
        """Проверить get_logger с уже квалифицированным именем."""
        logger = barcodeforge.get_logger("barcodeforge.barcodegen.engine")
        assert logger.name == "barcodeforge.barcodegen.engine"

    def test_get_logger_with_main(self) -> None:
        """Проверить get_logger с модулем __main__."""
        assert barcodeforge.get_logger("__main__").name == "barcodeforge.main"

    def test_logger_is_configured(self) -> None:
        """Проверить, что корневой логгер пакета имеет обработчик и не распространяет записи."""
        root_logger = logging.getLogger("barcodeforge")
        assert len(root_logger.handlers) >= 1
        assert root_logger.propagate is False

    def test_log_level_from_environment(self) -> None:
        """Проверить, что уровень логирования задаётся переменной окружения."""
        root_logger = logging.getLogger("barcodeforge")
        saved_handlers = root_logger.handlers[:]
        saved_level = root_logger.level
        try:
            for handler in saved_handlers:
                root_logger.removeHandler(handler)
            with mock.patch.dict("os.environ", {"BARCODEFORGE_LOG_LEVEL": "DEBUG"}):
                barcodeforge._setup_logging()
            assert root_logger.level == logging.DEBUG
        finally:
            for handler in root_logger.handlers[:]:
                root_logger.removeHandler(handler)
            for handler in saved_handlers:
                root_logger.addHandler(handler)
            root_logger.setLevel(saved_level)

    def test_log_file_handler(self) -> None:
        """Проверить, что BARCODEFORGE_LOG_FILE добавляет ротирующий файловый обработчик."""
        root_logger = logging.getLogger("barcodeforge")
        saved_handlers = root_logger.handlers[:]
        with tempfile.TemporaryDirectory() as tmpdir:
            log_file = Path(tmpdir) / "logs" / "barcodeforge.log"
            try:
                for handler in saved_handlers:
                    root_logger.removeHandler(handler)
                with mock.patch.dict("os.environ", {"BARCODEFORGE_LOG_FILE": str(log_file)}):
                    barcodeforge._setup_logging()
                kinds = {type(h).__name__ for h in root_logger.handlers}
                assert "RotatingFileHandler" in kinds
                assert log_file.parent.exists()
            finally:
                for handler in root_logger.handlers[:]:
                    root_logger.removeHandler(handler)
                    handler.close()
                for handler in saved_handlers:
                    root_logger.addHandler(handler)


class TestConfiguration:
    """Тестирование управления конфигурацией."""

    def test_load_config_defaults(self) -> None:
        """Проверить, что load_config возвращает значения по умолчанию, когда файла нет."""
        with tempfile.TemporaryDirectory() as tmpdir:
            config = barcodeforge.load_config(Path(tmpdir) / "missing.json")
        assert config["output_format"] == "png"
        assert config["error_correction_level"] == "M"
        assert config["pdf417_y_height"] == 3

    def test_load_config_from_file(self) -> None:
        """Проверить, что пользовательские значения накладываются поверх значений по умолчанию."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "barcodeforge.json"
            path.write_text(json.dumps({"output_format": "svg", "show_text": False}), encoding="utf-8")
            config = barcodeforge.load_config(path)
        assert config["output_format"] == "svg"
        assert config["show_text"] is False
        assert config["text_gap"] == 1.0

    @pytest.mark.parametrize("content", ["{not json", "[1, 2, 3]"])
    def test_load_config_invalid_file(self, content: str) -> None:
        """Проверить, что повреждённый файл даёт конфигурацию по умолчанию."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "barcodeforge.json"
            path.write_text(content, encoding="utf-8")
            config = barcodeforge.load_config(path)
        assert config["output_format"] == "png"

    def test_config_seeds_engine_settings(self) -> None:
        """Проверить, что словарь load_config переводится в EncodingConfiguration."""
        config = barcodeforge.load_config(Path("/nonexistent/barcodeforge.json"))
        config["error_correction_level"] = "Q"
        config["pdf417_y_height"] = 5
        qr = EncodingConfiguration.from_mapping(config, SymbologyKind.QR)
        assert qr.error_correction_level is QRErrorCorrection.Q
        assert qr.y_height == 3
        pdf = EncodingConfiguration.from_mapping(config, SymbologyKind.PDF417)
        assert pdf.y_height == 5


class TestDependencies:
    """Тестирование проверки зависимостей."""

    def test_check_dependencies(self) -> None:
        """Проверить, что обязательные зависимости доступны."""
        deps = barcodeforge.check_dependencies()
        assert set(deps) == {"pillow", "pdf417gen", "qrcode", "python-barcode"}
        assert deps["pillow"] is True
        assert deps["pdf417gen"] is True
