"""Typed HTTP client rendering.

The client is TypeScript and uses ``${...}`` template literals, so the module
text is assembled from placeholder templates with ``str.replace`` rather than
``str.format``.
"""

from autoschema.config import AdvancedSettings, ApiSettings
from autoschema.models.entity import EntityDescriptor
from autoschema.models.enums import AuthStyle
from autoschema.services.interface_renderer import Clock, banner, utc_now
from autoschema.services.naming import resource_path, to_camel_case, ts_string

_CLIENT_TEMPLATE = """\
export type QueryParams = Record<string, string | number | boolean | null | undefined>;

export type Identifier = number | string;

export class ApiError extends Error {
  constructor(public readonly status: number, public readonly body: string) {
    super(`Request failed with status ${status}`);
    this.name = 'ApiError';
  }
}

interface RequestOptions {
  params?: QueryParams;
  data?: unknown;
}

const BODY_METHODS = ['POST', 'PUT', 'PATCH'];

export class ApiClient {
__TOKEN_FIELD__  constructor(private readonly baseUrl: string = __BASE_URL__) {}
__TOKEN_SETTER__
  async request<T>(method: string, path: string, options: RequestOptions = {}): Promise<T> {
    let url = this.baseUrl.replace(/\\/+$/, '') + path;
    if (options.params) {
      const query = new URLSearchParams();
      for (const [key, value] of Object.entries(options.params)) {
        if (value !== undefined && value !== null) {
          query.append(key, String(value));
        }
      }
      const queryString = query.toString();
      if (queryString) {
        url += `?${queryString}`;
      }
    }

    const headers: Record<string, string> = { Accept: 'application/json' };
__AUTH_HEADERS__
    const init: RequestInit = { method, headers__CREDENTIALS__ };
    if (options.data !== undefined && BODY_METHODS.includes(method)) {
      headers['Content-Type'] = 'application/json';
      init.body = JSON.stringify(options.data);
    }

    const response = await fetch(url, init);
    if (!response.ok) {
      throw new ApiError(response.status, await response.text());
    }
    if (response.status === 204) {
      return undefined as T;
    }
    return (await response.json()) as T;
  }
}

export const apiClient = new ApiClient();
"""

_TOKEN_FIELD = "  private token: string | null = null;\n\n"

_TOKEN_SETTER = """
  setToken(token: string | null): void {
    this.token = token;
  }
"""

_AUTH_HEADERS: dict[AuthStyle, str] = {
    AuthStyle.NONE: "",
    AuthStyle.SESSION: "    headers['X-Requested-With'] = 'XMLHttpRequest';\n",
    AuthStyle.TOKEN: "    if (this.token) {\n      headers['Authorization'] = `Bearer ${this.token}`;\n    }\n",
}

_RESOURCE_TEMPLATE = """\
export const __VAR__ = {
  getAll: (params?: QueryParams) => apiClient.request<__TYPE__[]>('GET', '__PATH__', { params }),
  getById: (id: Identifier) => apiClient.request<__TYPE__>('GET', `__PATH__/${id}`),
  create: (data: Partial<__TYPE__>) => apiClient.request<__TYPE__>('POST', '__PATH__', { data }),
  update: (id: Identifier, data: Partial<__TYPE__>) => apiClient.request<__TYPE__>('PUT', `__PATH__/${id}`, { data }),
  delete: (id: Identifier) => apiClient.request<void>('DELETE', `__PATH__/${id}`),
  restore: (id: Identifier) => apiClient.request<__TYPE__>('POST', `__PATH__/${id}/restore`),
};
"""


class ApiClientRenderer:
    """Renders the ``api-client`` module: a fetch wrapper plus one resource object per entity."""

    def __init__(self, api: ApiSettings, advanced: AdvancedSettings, clock: Clock = utc_now) -> None:
        self._api = api
        self._advanced = advanced
        self._clock = clock

    def render(self, entities: list[EntityDescriptor]) -> str:
        lines = banner(self._advanced.add_timestamps, self._clock)
        lines.append("")
        if entities:
            names = ", ".join(entity.name for entity in entities)
            lines.append(f"import type {{ {names} }} from './index';")
            lines.append("")

        parts = ["\n".join(lines), self._client()]
        parts.extend(self._resource(entity) for entity in entities)
        return "\n".join(parts)

    def _client(self) -> str:
        auth = self._api.authentication
        token = auth is AuthStyle.TOKEN
        return (
            _CLIENT_TEMPLATE.replace("__TOKEN_FIELD__", _TOKEN_FIELD if token else "")
            .replace("__TOKEN_SETTER__", _TOKEN_SETTER if token else "")
            .replace("__BASE_URL__", ts_string(self._api.base_url))
            .replace("__AUTH_HEADERS__\n", _AUTH_HEADERS[auth])
            .replace("__CREDENTIALS__", ", credentials: 'include'" if auth is AuthStyle.SESSION else "")
        )

    def _resource(self, entity: EntityDescriptor) -> str:
        return (
            _RESOURCE_TEMPLATE.replace("__VAR__", f"{to_camel_case(entity.name)}Api")
            .replace("__TYPE__", entity.name)
            .replace("__PATH__", f"/{resource_path(entity.name)}")
        )


__all__ = ["ApiClientRenderer"]
