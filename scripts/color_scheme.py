#!/usr/bin/env -S uv run --quiet --script

# /// script
# dependencies = [
#   "loguru",
#   "PyGObject",
# ]
# ///
"""
Показывает и при необходимости меняет системную цветовую схему (светлая / тёмная)
в окружениях на базе GNOME.

Новое значение записывается через `gsettings`, текущее значение читается
из xdg-desktop-portal по D-Bus (org.freedesktop.portal.Settings).

Использование:
    color_scheme.py
    color_scheme.py dark
    color_scheme.py light
    color_scheme.py no-preference
"""
import argparse
import os
import subprocess
import sys
import time
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Callable, Dict, Optional

from loguru import logger

GSETTINGS_COMMAND = ["gsettings", "set", "org.gnome.desktop.interface", "color-scheme"]

PORTAL_BUS_NAME = "org.freedesktop.portal.Desktop"
PORTAL_OBJECT_PATH = "/org/freedesktop/portal/desktop"
PORTAL_INTERFACE = "org.freedesktop.portal.Settings"
PORTAL_METHOD = "Read"
APPEARANCE_NAMESPACE = "org.freedesktop.appearance"
COLOR_SCHEME_KEY = "color-scheme"

DEFAULT_DELAY = "0.1"

NO_PREFERENCE = "no-preference"
DEFAULT = "default"


class ColorScheme(Enum):
    """Предпочтение цветовой схемы."""

    DEFAULT = "default"
    LIGHT = "light"
    DARK = "dark"

    @classmethod
    def from_code(cls, code: int) -> "ColorScheme":
        """Код org.freedesktop.appearance: 1 - тёмная, 2 - светлая, остальное - без предпочтения."""
        return PORTAL_CODES.get(code, cls.DEFAULT)

    def to_gsettings(self) -> str:
        return GSETTINGS_VALUES[self]


PORTAL_CODES = {
    1: ColorScheme.DARK,
    2: ColorScheme.LIGHT,
}

GSETTINGS_VALUES = {
    ColorScheme.DEFAULT: "default",
    ColorScheme.LIGHT: "prefer-light",
    ColorScheme.DARK: "prefer-dark",
}


def scheme_names(neutral: str = NO_PREFERENCE) -> Dict[str, ColorScheme]:
    """Допустимые значения аргумента CLI для заданного написания нейтральной схемы."""
    return {
        neutral: ColorScheme.DEFAULT,
        "light": ColorScheme.LIGHT,
        "dark": ColorScheme.DARK,
    }


def parse_scheme(text: str, neutral: str = NO_PREFERENCE) -> ColorScheme:
    names = scheme_names(neutral)
    if text not in names:
        raise ValueError(f"Неизвестная цветовая схема: {text}")
    return names[text]


def format_scheme(scheme: ColorScheme, neutral: str = NO_PREFERENCE) -> str:
    if scheme is ColorScheme.DEFAULT:
        return neutral
    return scheme.value


# MARK: Writer
class SettingsWriter(ABC):
    """Записывает выбранную схему в настройки системы."""

    @abstractmethod
    def write(self, scheme: ColorScheme) -> None:
        pass


class GSettingsWriter(SettingsWriter):
    def write(self, scheme: ColorScheme) -> None:
        """
        Запускает `gsettings set ...` и не дожидается завершения.

        Raises:
            OSError: если процесс не удалось запустить.
        """
        command = [*GSETTINGS_COMMAND, scheme.to_gsettings()]
        logger.debug(f"Запуск: {' '.join(command)}")
        subprocess.Popen(command)


# MARK: Reader
class SettingsReader(ABC):
    """Читает текущую схему из системы."""

    @abstractmethod
    def read(self) -> Optional[ColorScheme]:
        """
        Returns:
            Текущая схема или None, если её не удалось получить.
        """
        pass


def scheme_from_reply(value: Any) -> Optional[ColorScheme]:
    """Разбирает распакованный ответ Settings.Read."""
    # Read отдаёт (v), а некоторые версии портала заворачивают значение ещё раз
    while isinstance(value, tuple) and len(value) == 1:
        value = value[0]

    if isinstance(value, bool) or not isinstance(value, int):
        logger.debug(f"Неожиданный ответ портала: {value!r}")
        return None

    return ColorScheme.from_code(value)


class PortalSettingsReader(SettingsReader):
    def read(self) -> Optional[ColorScheme]:
        reply = self._call_portal()
        if reply is None:
            return None
        return scheme_from_reply(reply)

    def _call_portal(self) -> Optional[Any]:
        try:
            import gi

            gi.require_version("Gio", "2.0")
            from gi.repository import Gio, GLib
        except (ImportError, ValueError) as e:
            logger.debug(f"PyGObject недоступен: {e}")
            return None

        try:
            bus = Gio.bus_get_sync(Gio.BusType.SESSION, None)
        except GLib.Error as e:
            logger.debug(f"Нет подключения к сессионной шине: {e}")
            return None

        try:
            proxy = Gio.DBusProxy.new_sync(
                bus,
                Gio.DBusProxyFlags.NONE,
                None,
                PORTAL_BUS_NAME,
                PORTAL_OBJECT_PATH,
                PORTAL_INTERFACE,
                None,
            )
            reply = proxy.call_sync(
                PORTAL_METHOD,
                GLib.Variant("(ss)", (APPEARANCE_NAMESPACE, COLOR_SCHEME_KEY)),
                Gio.DBusCallFlags.NONE,
                -1,
                None,
            )
        except GLib.Error as e:
            logger.debug(f"Ошибка вызова {PORTAL_INTERFACE}.{PORTAL_METHOD}: {e}")
            return None

        return reply.unpack()


# MARK: run()
def launch_writer(writer: SettingsWriter, scheme: ColorScheme) -> None:
    """Запускает запись схемы; если процесс не стартовал, завершает программу с кодом 1."""
    try:
        writer.write(scheme)
    except OSError as e:
        logger.critical(f"Не удалось запустить gsettings: {e}")
        sys.exit(1)


def run(
    scheme: Optional[ColorScheme],
    writer: SettingsWriter,
    reader: SettingsReader,
    delay: float = float(DEFAULT_DELAY),
    timeout: Optional[float] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> Optional[ColorScheme]:
    """
    Записывает схему (если указана) и возвращает прочитанное текущее значение.

    Пауза после записи не гарантирует, что gsettings успел применить значение.
    С timeout чтение повторяется каждые delay секунд, пока результат
    не совпадёт с записанным или не выйдет время.
    Без схемы пауза не нужна: значение читается сразу.
    """
    if scheme is None:
        return reader.read()

    launch_writer(writer, scheme)
    sleep(delay)

    if timeout is None:
        return reader.read()

    deadline = time.monotonic() + timeout
    current = reader.read()
    while current is not scheme and time.monotonic() < deadline:
        logger.debug(f"Схема ещё не применилась: {current}")
        sleep(delay)
        current = reader.read()
    return current


# MARK: main()
def non_negative_float(text: str) -> float:
    try:
        value = float(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Ожидается число: {text}")
    if value < 0:
        raise argparse.ArgumentTypeError(f"Значение не может быть отрицательным: {text}")
    return value


def parse_arguments(argv=None, neutral: str = NO_PREFERENCE, description: Optional[str] = None):
    """Парсинг аргументов командной строки"""
    names = list(scheme_names(neutral))
    parser = argparse.ArgumentParser(
        description=description or "Просмотр и изменение системной цветовой схемы"
    )
    parser.add_argument(
        "scheme",
        nargs="?",
        choices=names,
        help=f"{' | '.join(names)} – схема, на которую нужно переключиться",
    )
    parser.add_argument(
        "--delay",
        type=non_negative_float,
        default=os.getenv("COLOR_SCHEME_DELAY", DEFAULT_DELAY),
        help="Пауза перед чтением результата, секунды (по умолчанию: %(default)s)",
    )
    parser.add_argument(
        "--timeout",
        type=non_negative_float,
        help="Ждать применения схемы не дольше указанного числа секунд",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Подробный вывод в stderr",
    )
    return parser.parse_args(argv)


def setup_logging(verbose: bool) -> None:
    logger.remove()
    logger.add(
        sys.stderr,
        level="DEBUG" if verbose else "WARNING",
        format="<level>{level: <8}</level> {message}",
    )


def main(
    argv=None,
    *,
    neutral: str = NO_PREFERENCE,
    description: Optional[str] = None,
    writer: Optional[SettingsWriter] = None,
    reader: Optional[SettingsReader] = None,
) -> None:
    args = parse_arguments(argv, neutral=neutral, description=description)
    setup_logging(args.verbose)

    scheme = parse_scheme(args.scheme, neutral) if args.scheme else None

    current = run(
        scheme,
        writer or GSettingsWriter(),
        reader or PortalSettingsReader(),
        delay=args.delay,
        timeout=args.timeout,
    )

    if current is None:
        sys.exit(1)

    print(format_scheme(current, neutral))


if __name__ == "__main__":
    main()
