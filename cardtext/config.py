"""Extractor configuration.

Settings are a structured OmegaConf config: defaults from
:class:`ExtractorConfig`, optionally merged with a YAML file and with
``key=value`` overrides from the command line.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Union

from omegaconf import OmegaConf
from omegaconf.errors import OmegaConfBaseException

@dataclass
class ExtractorConfig:
    # Font file per family ("Noto Sans JP") or family and weight ("Noto Sans JP:bold")
    fonts: Dict[str, str] = field(default_factory=dict)
    # Use Pillow's bundled font for families without a font file
    use_default_font: bool = True
    # Remove OCR spaces between CJK characters
    normalize_cjk_spaces: bool = True
    # Fit font size with the text measurer; otherwise 0.85 × box height
    fit_font_size: bool = True

def load_config(
    config_path: Optional[Union[str, Path]] = None,
    overrides: Optional[List[str]] = None
) -> ExtractorConfig:
    """Build the extractor configuration.
    
    Args:
        config_path: Optional YAML file with settings to merge over the defaults
        overrides: Optional dotlist overrides, e.g. ``["fit_font_size=false"]``
        
    Returns:
        Validated ExtractorConfig instance
        
    Raises:
        ValueError: If the file cannot be read or a setting is invalid
    """
    config = OmegaConf.structured(ExtractorConfig)
    
    try:
        if config_path is not None:
            path = Path(config_path)
            if not path.is_file():
                raise ValueError(f"Config file not found: {path}")
            config = OmegaConf.merge(config, OmegaConf.load(path))
        
        if overrides:
            config = OmegaConf.merge(config, OmegaConf.from_dotlist(list(overrides)))
    except OmegaConfBaseException as e:
        raise ValueError(f"Invalid configuration: {e}") from e
    
    return OmegaConf.to_object(config)
