"""Constants shared by the client."""

DEFAULT_API_URL = "http://localhost:3000/api/v1"

LOGIN_ENDPOINT = "/auth/login"
LOGOUT_ENDPOINT = "/auth/logout"
REFRESH_ENDPOINT = "/auth/refresh"
CURRENT_USER_ENDPOINT = "/users/me"
USER_BY_CPF_ENDPOINT = "/users/by-cpf"
FISCAL_USERS_ENDPOINT = "/users/fiscals"
ZONES_ENDPOINT = "/zones"
PARKING_BY_PLATE_ENDPOINT = "/parkings/plate"
PARKING_HISTORY_ENDPOINT = "/parkings/history/all"
DASHBOARD_METRICS_ENDPOINT = "/parkings/dashboard/metrics"
AVULSO_PARKING_ENDPOINT = "/parkings/avulso"
NOTIFICATIONS_ENDPOINT = "/notifications"
PUBLIC_NOTIFICATION_ENDPOINT = "/notifications/public"
FISCAL_PARKINGS_ENDPOINT = "/fiscal-parkings"
FISCAL_STATISTICS_ENDPOINT = "/fiscal-parkings/statistics"
FISCAL_SETTLEMENTS_ENDPOINT = "/fiscal-settlements"
PENDING_SETTLEMENTS_ENDPOINT = "/fiscal-settlements/pending"
GENERATE_SETTLEMENT_ENDPOINT = "/fiscal-settlements/generate"

TOKEN_KEY = "zonaazul_token"
REFRESH_TOKEN_KEY = "zonaazul_refresh_token"
USER_KEY = "zonaazul_user"

LOGIN_PATH = "/login"
PUBLIC_NOTIFICATION_PATH = "/notificacao"
ADMIN_HOME_PATH = "/dashboard"
FISCAL_HOME_PATH = "/fiscal/dashboard"

ALLOWED_ROLES = ("admin", "fiscal")

DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_QUERY_RETRY = 2
DEFAULT_QUERY_STALE_TIME = 0.0
DEFAULT_POLL_INTERVAL = 3.0
DEFAULT_REDIRECT_DELAY = 0.1
DEFAULT_PAGE_LIMIT = 20

NETWORK_ERROR_CODE = "NETWORK_ERROR"

DEFAULT_HEADERS = {
    "Accept": "application/json",
    "User-Agent": "pyzonaazul",
}
