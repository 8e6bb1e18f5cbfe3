from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Slot(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int
    slot_no: Union[int, float] = Field(..., alias="slotNo")
    is_covered: bool = Field(..., alias="isCovered")
    is_ev_charging: bool = Field(..., alias="isEVCharging")
    is_occupied: bool = Field(False, alias="isOccupied")
    vehicle_id: Optional[str] = Field(None, alias="vehicleId")


class SlotCreate(BaseModel):
    # slotNo is checked by the route so a bad value gets the "Invalid slot number" message
    slot_no: Any = Field(None, alias="slotNo")
    is_covered: bool = Field(False, alias="isCovered")
    is_ev_charging: bool = Field(False, alias="isEVCharging")

    @field_validator("is_covered", "is_ev_charging", mode="before")
    @classmethod
    def null_flag_is_false(cls, value: Any) -> Any:
        return False if value is None else value


class ParkRequest(BaseModel):
    needs_ev: bool = Field(False, alias="needsEV")
    needs_cover: bool = Field(False, alias="needsCover")

    @field_validator("needs_ev", "needs_cover", mode="before")
    @classmethod
    def null_flag_is_false(cls, value: Any) -> Any:
        return False if value is None else value


class SlotResponse(BaseModel):
    success: bool
    message: str
    slot: Optional[Slot] = None


class SlotListResponse(BaseModel):
    success: bool = True
    slots: List[Slot]


class StatsResponse(BaseModel):
    success: bool = True
    total: int
    occupied: int
    available: int
