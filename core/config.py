from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

class Settings(BaseSettings):
    """
    Centralized application settings. Pydantic's BaseSettings will automatically
    load these from environment variables or a .env file.
    """
    # --- Canvas ---
    CANVAS_WIDTH: float = Field(800.0, description="Width of the layout canvas; its center is the centering target.")
    CANVAS_HEIGHT: float = Field(600.0, description="Height of the layout canvas.")

    # --- Graph Construction ---
    PARAMETER_WEIGHT_SCALE: float = Field(10.0, description="Divisor applied to a region's mean physical parameter to get the edge weight.")
    BIOLOGY_WEIGHT_SCALE: float = Field(100.0, description="Divisor applied to a region's mean biological indicator to get the edge weight.")
    MIN_EDGE_WEIGHT: float = Field(0.1, description="Lower clamp for parameter and biology edge weights.")
    MAX_EDGE_WEIGHT: float = Field(10.0, description="Upper clamp for parameter and biology edge weights.")

    # --- Simulation Schedule ---
    ALPHA_START: float = Field(1.0, description="Alpha assigned to a freshly built simulation.")
    ALPHA_MIN: float = Field(0.001, description="The simulation is converged once alpha drops below this value.")
    ALPHA_DECAY: float = Field(1 - 0.001 ** (1 / 300), description="Fraction of alpha removed on every tick.")
    VELOCITY_DECAY: float = Field(0.4, description="Fraction of velocity lost on every tick (friction).")
    REHEAT_ALPHA: float = Field(0.3, description="Alpha used when a drag starts.")

    # --- Forces ---
    LINK_DISTANCE: float = Field(100.0, description="Target separation between the two endpoints of an edge.")
    LINK_ITERATIONS: int = Field(1, description="Relaxation passes of the link force per tick.")
    CHARGE_STRENGTH: float = Field(-300.0, description="Many-body strength; negative values repel.")
    CHARGE_THETA: float = Field(0.9, description="Barnes-Hut accuracy parameter.")
    CHARGE_DISTANCE_MIN: float = Field(1.0, description="Distances below this are clamped when computing charge.")
    CENTER_STRENGTH: float = Field(0.1, description="How strongly the centroid is pulled back to the canvas center.")
    COLLISION_MARGIN: float = Field(18.0, description="Padding added to every node's radius for collision.")
    COLLISION_STRENGTH: float = Field(0.7, description="Fraction of an overlap resolved per collision pass.")
    COLLISION_ITERATIONS: int = Field(1, description="Collision passes per tick.")

    # --- View ---
    SCALE_MIN: float = Field(0.1, description="Smallest zoom factor accepted by the view transform.")
    SCALE_MAX: float = Field(4.0, description="Largest zoom factor accepted by the view transform.")

    # --- Streaming ---
    STREAM_TICK_INTERVAL: float = Field(1 / 30, description="Seconds between two streamed ticks.")
    STREAM_MAX_TICKS: int = Field(1000, description="Upper bound on ticks sent by a single stream.")

    # --- System Parameters ---
    LAYOUT_SEED: int = Field(42, description="Seed for the jiggle applied to coincident nodes.")
    LOG_LEVEL: str = Field("INFO", description="Level used by the JSON loggers.")

    model_config = SettingsConfigDict(env_file='.env', env_file_encoding='utf-8', extra='ignore')

settings = Settings()
