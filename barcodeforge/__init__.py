"""
Пакет barcodeforge
==================

Движок кодирования и отрисовки штрих-кодов: 19 символик (линейные,
GS1 DataBar, японский почтовый код, QR, DataMatrix, PDF417).

Этот пакет предоставляет:
    - Кодировщики символик с проверкой полезной нагрузки и контрольных цифр
    - Коды Рида-Соломона для QR (GF(256)), DataMatrix (GF(256)) и PDF417 (GF(929))
    - Расчёт геометрии: модуль, тихие зоны, растяжение по ширине, подгонка пикселей
    - Растровый вывод PNG/JPEG (Pillow) и векторный SVG
    - Человекочитаемую подпись под линейными кодами
    - Фасад BarcodeEngine со сменой настроек, повторной отрисовкой и освобождением

Пример базового использования:
    >>> from barcodeforge import BarcodeEngine, SymbologyKind
    >>>
    >>> with BarcodeEngine(SymbologyKind.QR) as engine:
    ...     engine.set_error_correction_level("H")
    ...     result = engine.draw_2d("https://example.com", 200)
    ...     if result:
    ...         png_b64 = engine.get_base64()

Пакетная генерация:
    >>> from barcodeforge import BarcodeJob, batch_draw
    >>> jobs = [BarcodeJob(kind=SymbologyKind.JAN13, code="490123456789",
    ...                    width=200, height=80)]
    >>> outputs = batch_draw(jobs)

Управление конфигурацией:
    >>> import os
    >>> os.environ['BARCODEFORGE_LOG_LEVEL'] = 'DEBUG'
    >>>
    >>> from barcodeforge import load_config, get_logger
    >>> config = load_config()
    >>> print(config["output_format"])
    png

Автор: barcodeforge contributors
Версия: 0.1.0
Лицензия: MIT
Python: 3.11+
"""

import json
import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional

# =============================================================================
# МЕТАДАННЫЕ ВЕРСИИ
# =============================================================================

__version__ = "0.1.0"
__author__ = "barcodeforge contributors"
__description__ = "Barcode encoding and rendering engine for 19 symbologies"
__license__ = "MIT"
__python_requires__ = ">=3.11"

# Компоненты семантической версии
VERSION_MAJOR = 0
VERSION_MINOR = 1
VERSION_PATCH = 0

# =============================================================================
# ПРОВЕРКА ВЕРСИИ PYTHON
# =============================================================================

if sys.version_info < (3, 11):
    raise RuntimeError(
        f"barcodeforge требует Python 3.11 или выше. "
        f"Текущая версия: {sys.version_info.major}."
        f"{sys.version_info.minor}.{sys.version_info.micro}"
    )

# =============================================================================
# КОНФИГУРАЦИЯ ЛОГИРОВАНИЯ
# =============================================================================

_ROOT_LOGGER_NAME = "barcodeforge"


def _setup_logging() -> None:
    """
    Инициализировать общепакетную конфигурацию логирования.

    Настраивает логгер пакета с:
    - Консольным обработчиком (stderr) для WARNING и выше
    - Ротирующим файловым обработчиком, только если задана переменная
      окружения BARCODEFORGE_LOG_FILE (движок сам не пишет на диск)
    - Структурированным форматом с временной меткой, уровнем,
      модулем и сообщением

    Уровень логирования задаётся переменной окружения
    BARCODEFORGE_LOG_LEVEL. Допустимые значения:
    DEBUG, INFO, WARNING, ERROR, CRITICAL

    Функция вызывается автоматически при импорте пакета и
    идемпотентна.
    """
    log_level_str = os.environ.get("BARCODEFORGE_LOG_LEVEL", "INFO").upper()

    log_level_map = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
    }
    log_level = log_level_map.get(log_level_str, logging.INFO)

    root_logger = logging.getLogger(_ROOT_LOGGER_NAME)
    if root_logger.handlers:
        return

    root_logger.setLevel(log_level)

    formatter = logging.Formatter(
        fmt=("[%(asctime)s] %(levelname)-8s " "[%(name)s.%(funcName)s:%(lineno)d] %(message)s"),
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # Консольный обработчик (stderr) - WARNING и выше
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.WARNING)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    log_file = os.environ.get("BARCODEFORGE_LOG_FILE")
    if log_file:
        try:
            log_path = Path(log_file)
            log_path.parent.mkdir(parents=True, exist_ok=True)

            file_handler = logging.handlers.RotatingFileHandler(
                filename=log_path,
                maxBytes=10 * 1024 * 1024,  # 10 МБ
                backupCount=5,
                encoding="utf-8",
            )
            file_handler.setLevel(log_level)
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)
        except (OSError, PermissionError) as e:
            root_logger.warning(
                f"Не удалось инициализировать файловое логирование: {e}. "
                f"Используется только консоль."
            )

    root_logger.propagate = False


def get_logger(module_name: str) -> logging.Logger:
    """
    Получить логгер в пространстве имён пакета.

    Логгеры именуются как 'barcodeforge.<module_name>' и наследуют
    обработчики логгера пакета.

    Аргументы:
        module_name: Имя модуля, обычно `__name__`.

    Возвращает:
        Экземпляр logging.Logger.

    Пример:
        >>> logger = get_logger(__name__)
        >>> logger.debug("Выбрана версия QR: %d", 5)
    """
    if not module_name.startswith(_ROOT_LOGGER_NAME):
        if module_name == "__main__":
            full_name = f"{_ROOT_LOGGER_NAME}.main"
        else:
            clean_name = module_name.lstrip(".")
            full_name = f"{_ROOT_LOGGER_NAME}.{clean_name}"
    else:
        full_name = module_name

    return logging.getLogger(full_name)


# =============================================================================
# УПРАВЛЕНИЕ КОНФИГУРАЦИЕЙ
# =============================================================================

# Значения конфигурации по умолчанию
_DEFAULT_CONFIG: Dict[str, Any] = {
    "output_format": "png",
    "foreground_color": [0, 0, 0, 255],
    "background_color": [255, 255, 255, 255],
    "show_text": True,
    "text_font_scale": 1.0,
    "text_gap": 1.0,
    "string_encoding": "utf-8",
    "error_correction_level": "M",
    "pdf417_aspect_ratio": 2.0,
    "pdf417_y_height": 3,
    "log_level": "INFO",
}


def load_config(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Загрузить настройки по умолчанию для движка из JSON-файла.

    Если файл не существует или содержит недопустимый JSON,
    возвращается конфигурация по умолчанию с предупреждением в логе.

    Ключи конфигурации:
        - output_format: str - "png", "jpg" или "svg"
        - foreground_color / background_color: [r, g, b, a]
        - show_text: bool - подпись под линейными кодами
        - text_font_scale / text_gap: float - масштаб шрифта и отступ
        - string_encoding: str - "utf-8" или "shift-jis"
        - error_correction_level: str - уровень QR (L/M/Q/H)
        - pdf417_aspect_ratio: float, pdf417_y_height: int
        - log_level: str

    Аргументы:
        config_path: Путь к файлу. Если None, ищется
                    'barcodeforge.json' в текущем каталоге.

    Возвращает:
        Словарь со всеми ключами по умолчанию, поверх которых
        наложены пользовательские значения.

    Пример:
        >>> config = load_config()
        >>> from barcodeforge.model.config import EncodingConfiguration
        >>> settings = EncodingConfiguration.from_mapping(config)
    """
    logger = get_logger(__name__)

    if config_path is None:
        config_path = Path("barcodeforge.json")

    config = _DEFAULT_CONFIG.copy()

    if config_path.exists():
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                user_config = json.load(f)

            if not isinstance(user_config, dict):
                raise ValueError(
                    f"Файл конфигурации должен содержать JSON-объект, "
                    f"получен {type(user_config).__name__}"
                )

            config.update(user_config)

            logger.info(f"Конфигурация загружена из {config_path}")
            logger.debug(f"Конфигурация: {config}")

        except json.JSONDecodeError as e:
            logger.warning(
                f"Не удалось разобрать {config_path}: Недопустимый JSON "
                f"в строке {e.lineno}, столбце {e.colno}. "
                f"Используется конфигурация по умолчанию."
            )
        except (OSError, PermissionError) as e:
            logger.warning(
                f"Не удалось прочитать {config_path}: {e}. "
                f"Используется конфигурация по умолчанию."
            )
        except ValueError as e:
            logger.warning(
                f"Недопустимый формат конфигурации: {e}. "
                f"Используется конфигурация по умолчанию."
            )
    else:
        logger.info(
            f"Файл конфигурации {config_path} не найден. "
            f"Используется конфигурация по умолчанию."
        )

    return config


def check_dependencies() -> Dict[str, bool]:
    """
    Проверить доступность зависимостей.

    Не вызывает исключений для отсутствующих пакетов, а возвращает
    словарь состояний.

    Проверяемые зависимости:
        Обязательные:
        - pillow: растровый вывод, кодирование PNG/JPEG, шрифты
        - pdf417gen: таблицы штриховых шаблонов PDF417

        Для тестов:
        - qrcode, python-barcode: эталонные кодировщики

    Возвращает:
        Словарь, отображающий имена пакетов на статус доступности.
    """
    dependencies: Dict[str, bool] = {}

    try:
        import PIL  # noqa: F401

        dependencies["pillow"] = True
    except ImportError:
        dependencies["pillow"] = False

    try:
        import pdf417gen  # noqa: F401

        dependencies["pdf417gen"] = True
    except ImportError:
        dependencies["pdf417gen"] = False

    try:
        import qrcode  # noqa: F401

        dependencies["qrcode"] = True
    except ImportError:
        dependencies["qrcode"] = False

    try:
        import barcode  # noqa: F401

        dependencies["python-barcode"] = True
    except ImportError:
        dependencies["python-barcode"] = False

    return dependencies


_setup_logging()

# =============================================================================
# ПУБЛИЧНЫЙ API
# =============================================================================

# Примечание: импорты размещены после утилит, чтобы логирование
# было настроено первым.

from .barcodegen.engine import (  # noqa: E402
    BarcodeEngine,
    barcode_session,
    batch_draw,
    draw_async,
)
from .barcodegen.errors import (  # noqa: E402
    BarcodeError,
    DrawResult,
    ErrorKind,
    InvalidGeometryError,
    InvalidHandleError,
    InvalidPayloadError,
    NoResultAvailableError,
    PayloadTooLargeError,
    UnsupportedSymbologyError,
)
from .model.config import EncodingConfiguration  # noqa: E402
from .model.enums import OutputFormat, SymbologyFamily, SymbologyKind  # noqa: E402
from .model.job import BarcodeJob  # noqa: E402

__all__ = [
    # Метаданные
    "__version__",
    "__author__",
    "__license__",
    "VERSION_MAJOR",
    "VERSION_MINOR",
    "VERSION_PATCH",
    # Утилиты
    "get_logger",
    "load_config",
    "check_dependencies",
    # Движок
    "BarcodeEngine",
    "barcode_session",
    "batch_draw",
    "draw_async",
    "BarcodeJob",
    "EncodingConfiguration",
    # Перечисления
    "SymbologyKind",
    "SymbologyFamily",
    "OutputFormat",
    # Ошибки
    "BarcodeError",
    "DrawResult",
    "ErrorKind",
    "InvalidGeometryError",
    "InvalidHandleError",
    "InvalidPayloadError",
    "NoResultAvailableError",
    "PayloadTooLargeError",
    "UnsupportedSymbologyError",
]
