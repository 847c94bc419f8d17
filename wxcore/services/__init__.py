from .coordinator import ErrorResponse, LocationResponse, RequestCoordinator, WeatherResponse

__all__ = ["RequestCoordinator", "WeatherResponse", "LocationResponse", "ErrorResponse"]
