import logging

from aiohttp import web

from gce_autoscaler.adapter.gce import SERVER_SETTINGS, GCEAutoScalerAdapter
from gce_autoscaler.autoscaler.gce.service import GCEInstanceGroupService
from gce_autoscaler.autoscaler.reconciler import InstancePoolReconciler
from gce_autoscaler.config.section.gce_autoscaler import GCEAutoScalerConfig
from gce_autoscaler.utility.logging.utility import setup_logger


def main():
    gce_config = GCEAutoScalerConfig.parse("GCE Instance Group AutoScaler", "gce_autoscaler")

    setup_logger(
        gce_config.logging_config.paths, gce_config.logging_config.config_file, gce_config.logging_config.level
    )

    reconciler = InstancePoolReconciler.from_config(gce_config, GCEInstanceGroupService())
    logging.info(f"starting {reconciler!r}")

    gce_adapter = GCEAutoScalerAdapter(reconciler)

    app = gce_adapter.create_app()
    web.run_app(
        app,
        host=gce_config.web_config.adapter_web_host,
        port=gce_config.web_config.adapter_web_port,
        **SERVER_SETTINGS,
    )


if __name__ == "__main__":
    main()
