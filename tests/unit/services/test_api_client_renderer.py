"""Unit tests for the ApiClientRenderer."""

from autoschema.config import AdvancedSettings, ApiSettings
from autoschema.models.entity import EntityDescriptor
from autoschema.models.enums import AuthStyle
from autoschema.services.api_client_renderer import ApiClientRenderer


def _entity(name: str) -> EntityDescriptor:
    return EntityDescriptor(identifier=f"app.models.{name}", name=name, table=name.lower())


def _render(api: ApiSettings, entities: list[EntityDescriptor] | None = None) -> str:
    renderer = ApiClientRenderer(api=api, advanced=AdvancedSettings())
    return renderer.render(entities if entities is not None else [_entity("User"), _entity("BlogPost")])


class TestResources:
    """Tests for per-entity resource objects."""

    def test_imports_entity_types(self) -> None:
        content = _render(ApiSettings())

        assert "import type { User, BlogPost } from './index';" in content

    def test_resource_object_per_entity(self) -> None:
        content = _render(ApiSettings())

        assert "export const userApi = {" in content
        assert "export const blogPostApi = {" in content
        assert "apiClient.request<User[]>('GET', '/users', { params })" in content
        assert "apiClient.request<BlogPost>('GET', `/blog-posts/${id}`)" in content
        assert "create: (data: Partial<User>) => apiClient.request<User>('POST', '/users', { data })," in content
        assert "apiClient.request<User>('PUT', `/users/${id}`, { data })" in content
        assert "apiClient.request<void>('DELETE', `/users/${id}`)" in content
        assert "apiClient.request<User>('POST', `/users/${id}/restore`)" in content

    def test_no_entities_renders_bare_client(self) -> None:
        content = _render(ApiSettings(), entities=[])

        assert "import type" not in content
        assert "export class ApiClient {" in content
        assert "Api = {" not in content


class TestClient:
    """Tests for the request wrapper and authentication presets."""

    def test_base_url_is_embedded(self) -> None:
        content = _render(ApiSettings(base_url="https://api.example.com/v1"))

        assert "private readonly baseUrl: string = 'https://api.example.com/v1'" in content

    def test_throws_on_non_ok_and_sends_json_bodies(self) -> None:
        content = _render(ApiSettings())

        assert "if (!response.ok) {" in content
        assert "throw new ApiError(response.status, await response.text());" in content
        assert "const BODY_METHODS = ['POST', 'PUT', 'PATCH'];" in content
        assert "init.body = JSON.stringify(options.data);" in content
        assert "this.baseUrl.replace(/\\/+$/, '')" in content

    def test_session_authentication(self) -> None:
        content = _render(ApiSettings(authentication=AuthStyle.SESSION))

        assert "headers['X-Requested-With'] = 'XMLHttpRequest';" in content
        assert "credentials: 'include'" in content
        assert "setToken" not in content

    def test_token_authentication(self) -> None:
        content = _render(ApiSettings(authentication=AuthStyle.TOKEN))

        assert "private token: string | null = null;" in content
        assert "setToken(token: string | null): void {" in content
        assert "headers['Authorization'] = `Bearer ${this.token}`;" in content
        assert "credentials" not in content

    def test_no_authentication(self) -> None:
        content = _render(ApiSettings(authentication=AuthStyle.NONE))

        assert "X-Requested-With" not in content
        assert "Authorization" not in content
        assert "const init: RequestInit = { method, headers };" in content

    def test_no_placeholders_leak(self) -> None:
        for auth in AuthStyle:
            assert "__" not in _render(ApiSettings(authentication=auth))
