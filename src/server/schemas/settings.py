from typing import Any, Dict, Optional

from pydantic import BaseModel


class SettingsIn(BaseModel):
    # Validated by parse_settings so the error message can name the bad field
    settings: Optional[Dict[str, Any]] = None
