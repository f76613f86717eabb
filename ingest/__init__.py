from .schemas import TRACKED_PARAMETERS, ReadingIn, SensorParameter, StoredReading, TimeWindow

__all__ = ["TRACKED_PARAMETERS", "ReadingIn", "SensorParameter", "StoredReading", "TimeWindow"]
