from sqlalchemy import String, orm
from sqlalchemy.orm import mapped_column

from typing_extensions import Annotated

str255 = Annotated[str, 255]
str512 = Annotated[str, 512]
str2048 = Annotated[str, 2048]
idpk = Annotated[str, mapped_column(String(255), primary_key=True)]
tokenpk = Annotated[str, mapped_column(String(1024), primary_key=True)]


class Base(orm.DeclarativeBase):
    type_annotation_map = {
        str255: String(255),
        str512: String(512),
        str2048: String(2048),
        idpk: String(255),
        tokenpk: String(1024),
    }
