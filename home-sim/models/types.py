from enum import Enum

class FanSpeed(Enum):
    OFF = "OFF"
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"

class DoorState(Enum):
    LOCKED = "LOCKED"
    UNLOCKED = "UNLOCKED"

class SecurityStatus(Enum):
    ARMED = "ARMED"
    DISARMED = "DISARMED"

class Severity(Enum):
    INFO = "info"
    WARNING = "warning"
    ALERT = "alert"

class DeviceStatus(Enum):
    OK = "OK"
    WARNING = "WARNING"

class HomeMode(Enum):
    NIGHT = "night"
    VACATION = "vacation"
    PARTY = "party"
    ECO = "eco"

class CommandType(Enum):
    SET_TEMPERATURE = "SET_TEMPERATURE"
    SET_FAN = "SET_FAN"
    SET_LIGHT = "SET_LIGHT"
    SET_WINDOW = "SET_WINDOW"
    SET_DOOR = "SET_DOOR"
    CREATE_SCHEDULE = "CREATE_SCHEDULE"
    CREATE_SCENE = "CREATE_SCENE"
    ACTIVATE_SCENE = "ACTIVATE_SCENE"
    SET_MODE = "SET_MODE"
    TEXT_COMMAND = "TEXT_COMMAND"

class MessageType(Enum):
    INITIAL_STATE = "INITIAL_STATE"
    STATE_UPDATE = "STATE_UPDATE"
    ERROR = "ERROR"
