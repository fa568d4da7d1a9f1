"""Shared fixtures for azcfg tests."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest

from azcfg.config import AzcfgConfig, save_config
from azcfg.manifest import Manifest, save_manifest
from azcfg.project import AZCFG_DIR, CONFIG_FILE, MANIFEST_FILE

if TYPE_CHECKING:
    from pathlib import Path


MAIN_C_TEMPLATE = """\
/* USER CODE BEGIN Header */
/**
  * @file    main.c
  */
/* USER CODE END Header */
#include "main.h"
#include "app_threadx.h"

/* USER CODE BEGIN Includes */

/* USER CODE END Includes */

UART_HandleTypeDef huart3;

int main(void)
{
  /* USER CODE BEGIN 1 */

  /* USER CODE END 1 */
  HAL_Init();
  SystemClock_Config();
  MX_ThreadX_Init();

  while (1)
  {
    /* USER CODE BEGIN 3 */
    /* USER CODE END 3 */
  }
}
"""


@pytest.fixture
def main_c_template() -> str:
    """A CubeMX-style main.c with four USER CODE sections."""
    return MAIN_C_TEMPLATE


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """A temporary directory simulating a project root."""
    return tmp_path


@pytest.fixture
def initialized_project(tmp_path: Path) -> Path:
    """A temporary project with .azcfg/ already initialized."""
    azcfg = tmp_path / AZCFG_DIR
    azcfg.mkdir()

    config = AzcfgConfig()
    config.project.name = "test-project"
    config.defaults.series = "h7"
    config.generation.backend = "dry-run"
    save_config(config, azcfg / CONFIG_FILE)
    save_manifest(Manifest(), azcfg / MANIFEST_FILE)

    return tmp_path


@pytest.fixture
def autogen_tree(tmp_path: Path) -> Path:
    """A minimal PACK_AZRTOS_AutoGen tree with one series and two boards."""
    root = tmp_path / "PACK_AZRTOS_AutoGen"
    for sub in ("FileX", "NetXDuo", "ThreadX", "USBX", "templates"):
        (root / "apps" / sub).mkdir(parents=True)
    (root / "pack").mkdir()
    (root / "azrtos_pg.py").write_text("# generator\n", encoding="utf-8")

    json_dir = root / "apps" / "json"
    json_dir.mkdir(parents=True)
    (json_dir / "h7.json").write_text(
        json.dumps({"serie": [{"boards": ["NUCLEO-H723ZG", "STM32H747I-DISCO"]}]}),
        encoding="utf-8",
    )
    (json_dir / "NUCLEO-H723ZG.json").write_text(
        json.dumps(
            {
                "board": [
                    {
                        "apps": ["Tx_Thread_Creation", "Fx_File_Edit_Standalone", "Nx_TCP_Echo"],
                        "apps_details": [
                            {
                                "name": "Tx_Thread_Creation",
                                "description": "Creates two ThreadX threads",
                                "features": ["threads", "event flags"],
                            }
                        ],
                    }
                ]
            }
        ),
        encoding="utf-8",
    )
    (json_dir / "STM32H747I-DISCO.json").write_text(
        json.dumps({"board": [{"apps": ["Ux_Device_HID"]}]}),
        encoding="utf-8",
    )

    app_dir = root / "apps" / "ThreadX" / "Tx_Thread_Creation" / "Core" / "Src"
    app_dir.mkdir(parents=True)
    (app_dir / "main.c.j2").write_text(MAIN_C_TEMPLATE, encoding="utf-8")
    (app_dir / "app_threadx.c.j2").write_text("/* app */\n", encoding="utf-8")
    (app_dir / "notes.txt").write_text("not a template\n", encoding="utf-8")
    return root
