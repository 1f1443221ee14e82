import json
import os
from typing import Any

def load_text(path: str) -> str:
    # read and remove BOMs anywhere (utf-8-sig only strips a leading BOM)
    with open(path, "r", encoding="utf-8-sig") as f:
        text = f.read()
    return text.replace("\ufeff", "")

def save_text(path: str, text: str) -> None:
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    with open(path, "w", encoding="utf-8", newline="\n") as f:
        f.write(text)

def save_json(path: str, data: Any) -> None:
    save_text(path, json.dumps(data, ensure_ascii=False, indent=2))
