from pydantic_settings import BaseSettings

from clawmark.models import RenderStyle


class Settings(BaseSettings):
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"
    max_input_chars: int = 200_000
    rate_limit_enabled: bool = True
    rate_limit_render: str = "120/minute"
    force_hard_line_breaks: bool = False
    style_code_bg: str | None = None
    style_code_fg: str | None = None
    style_code_block_bg: str | None = None
    style_code_keyword_color: str | None = None
    style_code_string_color: str | None = None
    style_code_comment_color: str | None = None
    style_heading_color: str | None = None
    style_blockquote_border: str | None = None
    style_blockquote_fg: str | None = None
    style_table_border: str | None = None

    model_config = {"env_prefix": "CLAWMARK_"}

    def default_style(self) -> RenderStyle | None:
        """Style used by the render route when a request carries none."""
        values = {
            name.removeprefix("style_"): getattr(self, name)
            for name in type(self).model_fields
            if name.startswith("style_")
        }
        if not any(values.values()):
            return None
        return RenderStyle(**values)


settings = Settings()
