#!/usr/bin/env -S uv run --quiet --script

# /// script
# dependencies = [
#   "loguru",
#   "PyGObject",
# ]
# ///
"""
Изменяет системную тему GNOME на светлую или тёмную и выводит текущую.

Использование:
    theme.py
    theme.py dark
    theme.py light
    theme.py default
"""
import color_scheme


def main(argv=None):
    color_scheme.main(
        argv,
        neutral=color_scheme.DEFAULT,
        description="Изменение системной темы на светлую или тёмную",
    )


if __name__ == "__main__":
    main()
