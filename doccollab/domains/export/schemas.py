from pydantic import BaseModel, ConfigDict


class ExportResponse(BaseModel):
    """Результат выгрузки документа"""
    title: str
    content: str
    format: str
    filename: str
    media_type: str

    model_config = ConfigDict(from_attributes=True)
