import voluptuous as vol

from homeassistant.config_entries import ConfigEntry, ConfigFlow, OptionsFlow

from .constants import (
    CONF_HOST,
    CONF_MAINTENANCE_ENABLED,
    CONF_MAINTENANCE_HOUR,
    CONF_MAINTENANCE_MINUTE,
    CONF_POLLING_INTERVAL,
    DEFAULT_MAINTENANCE_HOUR,
    DEFAULT_MAINTENANCE_MINUTE,
    DOMAIN,
    MAX_POLLING_INTERVAL,
    MIN_POLLING_INTERVAL,
)
from .infrastructure import (
    AddressResolver,
    DiscoveryTimeoutError,
    NetworkError,
    validate_host,
)
from .izone_api import IZoneAPI


class IZoneConfigFlow(ConfigFlow, domain=DOMAIN):
    VERSION = 1

    async def async_step_user(self, user_input=None):
        errors = {}

        if user_input is not None:
            host = (user_input.get(CONF_HOST) or "").strip()
            is_valid, _ = validate_host(host)

            if not is_valid:
                errors[CONF_HOST] = "invalid_host"
            else:
                if not host:
                    try:
                        host = await AddressResolver().async_discover()
                    except (DiscoveryTimeoutError, NetworkError):
                        errors["base"] = "no_bridge_found"

                if not errors:
                    api = IZoneAPI(host)
                    try:
                        result = await api.async_get_firmware()
                    finally:
                        await api.close()

                    if result.ok:
                        await self.async_set_unique_id(host)
                        self._abort_if_unique_id_configured()
                        return self.async_create_entry(
                            title=f"iZone @ {host}",
                            data={CONF_HOST: host},
                        )
                    errors[CONF_HOST] = "cannot_connect"

        return self.async_show_form(
            step_id="user",
            data_schema=vol.Schema({vol.Optional(CONF_HOST, default=""): str}),
            errors=errors,
        )

    @classmethod
    def async_get_options_flow(cls, entry: ConfigEntry):
        return IZoneOptionsFlow(entry)


class IZoneOptionsFlow(OptionsFlow):
    def __init__(self, entry):
        self.entry = entry

    async def async_step_init(self, user_input=None):
        errors = {}

        if user_input is not None:
            data = dict(user_input)
            if CONF_HOST in data:
                # A blank host makes the scheduler rediscover the bridge
                data[CONF_HOST] = (data[CONF_HOST] or "").strip()
            is_valid, _ = validate_host(data.get(CONF_HOST))
            if is_valid:
                return self.async_create_entry(title="", data=data)
            errors[CONF_HOST] = "invalid_host"

        options = self.entry.options
        current_host = options.get(CONF_HOST, self.entry.data.get(CONF_HOST, ""))
        return self.async_show_form(
            step_id="init",
            data_schema=vol.Schema(
                {
                    vol.Optional(CONF_HOST, default=current_host or ""): str,
                    vol.Optional(
                        CONF_POLLING_INTERVAL,
                        default=options.get(CONF_POLLING_INTERVAL, MIN_POLLING_INTERVAL),
                    ): vol.All(
                        vol.Coerce(int),
                        vol.Range(min=MIN_POLLING_INTERVAL, max=MAX_POLLING_INTERVAL),
                    ),
                    vol.Optional(
                        CONF_MAINTENANCE_ENABLED,
                        default=options.get(CONF_MAINTENANCE_ENABLED, False),
                    ): bool,
                    vol.Optional(
                        CONF_MAINTENANCE_HOUR,
                        default=options.get(CONF_MAINTENANCE_HOUR, DEFAULT_MAINTENANCE_HOUR),
                    ): vol.All(vol.Coerce(int), vol.Range(min=0, max=23)),
                    vol.Optional(
                        CONF_MAINTENANCE_MINUTE,
                        default=options.get(CONF_MAINTENANCE_MINUTE, DEFAULT_MAINTENANCE_MINUTE),
                    ): vol.All(vol.Coerce(int), vol.Range(min=0, max=59)),
                }
            ),
            errors=errors,
        )
