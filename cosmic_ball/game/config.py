# --- Display ---
WIDTH = 800
HEIGHT = 600
FPS = 60
TICK_MS = 1000.0 / FPS      # simulated wall-clock per tick (headless runs)

# --- World / Physics ---
GRAVITY = 0.5               # px/tick^2, sign = gravity direction
JUMP_FORCE = -12.0          # px/tick
SCROLL_SPEED = 3.0          # world scroll (px/tick)
MOVE_ACCEL = 0.5
MAX_VX = 8.0
FRICTION = 0.9
RESTITUTION = 0.7           # boundary bounce energy retention
SNAP_DISTANCE = 30.0        # anti-tunneling snap range (px)

# --- Player ---
PLAYER_X = 400.0
PLAYER_Y = 300.0
PLAYER_RADIUS = 20.0
MAX_JUMPS = 2
TRAIL_LENGTH = 15

# --- Entities ---
PLATFORM_WIDTH = 100
PLATFORM_HEIGHT = 20
HAZARD_SCALE = 0.7          # hazards are 70% of a platform
POWERUP_RADIUS = 10.0
SPIKE_FALL_SPEED = 2.0
SPIKE_TWISTED_FALL_SPEED = 3.0
PLATFORM_PRUNE_MARGIN = 100
ITEM_PRUNE_MARGIN = 50

# --- Platform reactions ---
NEBULA_BOUNCE_MULTIPLIER = 1.3
NEBULA_PHASING_MULTIPLIER = 1.5
COMET_SPEED_BOOST = 1.5
COMET_BOUNCE_MULTIPLIER = 0.8
STAR_SHIELD_BONUS = 300     # ticks
STAR_PHASING_SHIELD_BONUS = 150
STAR_PHASING_COMBO = 2
LANDING_BONUS = 10
ASTEROID_PENALTY = 50
ASTEROID_BOUNCE = 0.7       # x JUMP_FORCE

# --- Timed abilities (wall clock, ms) ---
BLACK_HOLE_REVERSE_MS = 3000
TIME_WARP_MS = 5000
MAGNET_MS = 8000
PHASING_MS = 3000
COMBO_INVINCIBLE_MS = 3000
SUPER_ABILITY_MS = 5000
STARDUST_BOOST_MS = 2000
GAME_OVER_DELAY_MS = 100
GAME_OVER_SCREEN_DELAY_MS = 1000

# --- Tick-counted abilities ---
CRYSTAL_SHIELD_TICKS = 600
CRYSTAL_BONUS_TICKS = 300

# --- Game speed ---
BASE_GAME_SPEED = 1.0
TIME_WARP_SPEED = 0.3
MAX_GAME_SPEED = 2.0
SPEED_STEP_SCORE = 100
SPEED_STEP = 0.1

# --- Magnet ---
MAGNET_RANGE = 200.0
MAGNET_PULL = 3.0

# --- Level generation ---
ROW_SPACING = 100
PLATFORM_GAP = 20
SEED_DEPTH = -2000          # initial rows are generated down to this y
EXTEND_SPAN = 300           # extension reaches this far past the highest row
MAX_PLATFORMS_PER_ROW = 3
POWERUP_CHANCE = 0.3
HAZARD_CHANCE = 0.2
SPIKE_TWISTED_CHANCE = 0.05
SPIKE_CHANCE = 0.05
SEED_DEFAULT = 12345

# --- Scoring ---
HEIGHT_SCORE_DIVISOR = 10
SCORE_MILESTONES = (500, 1000, 2000)
SUPER_MILESTONE_START = 3000
SUPER_MILESTONE_STEP = 1000
QUICK_COLLECT_MS = 2000
FAST_RECOLLECT_MS = 500
PATIENT_RECOLLECT_MS = 5000
SEQUENCE_LENGTH = 5
COMBO_INVINCIBLE_AT = 50
COMPLETION_BONUS = 500

# --- Persistence ---
HIGHSCORE_KEY = "cosmicHighScore"
HIGHSCORE_FILE = "cosmic_highscore.json"
HIGHSCORE_SAVE_INTERVAL_MS = 1000     # min gap between writes while the score climbs

# --- Input ---
KEYS_LEFT = ("ArrowLeft", "a")
KEYS_RIGHT = ("ArrowRight", "d")

# --- Colors (RGB) ---
COLOR_BG = (10, 10, 32)
COLOR_BG_EDGE = (5, 5, 16)
COLOR_FG = (255, 255, 255)
COLOR_PLAYER = (106, 106, 255)
COLOR_PLAYER_GLOW = (160, 160, 255)
COLOR_GOLD = (255, 255, 128)
COLOR_DANGER = (255, 64, 64)
COLOR_SHIELD = (128, 255, 255)
COLOR_MAGNET = (255, 128, 128)
COLOR_PHASE = (160, 64, 255)
COLOR_HUD = (200, 210, 255)
