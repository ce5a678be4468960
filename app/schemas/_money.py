from typing import Annotated
from decimal import Decimal

from pydantic import PlainSerializer

from app.services.pricing import round2

# Dumped as a two-place string ("1180.00") so clients never see a binary float.
Money = Annotated[Decimal, PlainSerializer(lambda value: str(round2(value)), return_type=str)]
