"""
CLI 模块

命令行接口实现。
"""

import asyncio
from typing import Optional

import click
from loguru import logger

from loaderkit.config import LoaderKitConfig, load_config
from loaderkit.exceptions import LoaderKitError, VersionIncompatibleError
from loaderkit.logger import setup_logger
from loaderkit.manager import LoaderManager
from loaderkit.models import LoaderVariant


LOADER_CHOICE = click.Choice([v.value for v in LoaderVariant], case_sensitive=False)


def _run(coro):
    try:
        return asyncio.run(coro)
    except LoaderKitError as e:
        raise click.ClickException(str(e))


def _echo_progress(message: str, current: int, total: int):
    click.echo(f"[{current}/{total}] {message}")


async def _with_manager(config: LoaderKitConfig, action):
    async with LoaderManager(config) as manager:
        return await action(manager)


@click.group()
@click.option("-c", "--config", "config_path", type=click.Path(exists=True), help="配置文件路径")
@click.option("--debug", is_flag=True, help="启用调试模式")
@click.version_option(version="0.1.0")
@click.pass_context
def main(ctx: click.Context, config_path: Optional[str], debug: bool):
    """loaderkit - Minecraft 模组加载器安装工具"""
    try:
        config = load_config(config_path) if config_path else LoaderKitConfig()
    except LoaderKitError as e:
        raise click.ClickException(str(e))

    setup_logger(
        level="DEBUG" if debug else config.log_level, log_file=config.log_file
    )
    # 命令结束前写完队列中的日志
    ctx.call_on_close(logger.complete)
    if debug:
        logger.debug("调试模式已启用")
    ctx.obj = config


@main.command()
@click.argument("loader", type=LOADER_CHOICE)
@click.option("--mc", "base_version", help="只列出与该 Minecraft 版本兼容的版本")
@click.option("--unstable", is_flag=True, help="包含测试版")
@click.pass_obj
def versions(config: LoaderKitConfig, loader: str, base_version: Optional[str], unstable: bool):
    """列出加载器版本"""
    result = _run(
        _with_manager(
            config,
            lambda m: m.list_versions(loader, base_version, include_unstable=unstable),
        )
    )
    if not result:
        click.echo("没有可用的版本")
        return
    for descriptor in result:
        flags = []
        if descriptor.recommended:
            flags.append("推荐")
        if not descriptor.stable:
            flags.append("测试版")
        suffix = f" ({', '.join(flags)})" if flags else ""
        click.echo(f"{descriptor.version}{suffix}")


@main.command()
@click.argument("loader", type=LOADER_CHOICE)
@click.argument("base_version")
@click.pass_obj
def recommend(config: LoaderKitConfig, loader: str, base_version: str):
    """显示推荐的加载器版本"""
    version = _run(
        _with_manager(config, lambda m: m.recommended_version(loader, base_version))
    )
    click.echo(version or "没有推荐版本")


@main.command()
@click.argument("loader", type=LOADER_CHOICE)
@click.argument("base_version")
@click.argument("loader_version", required=False)
@click.option("--game-dir", required=True, type=click.Path(file_okay=False), help="实例游戏目录")
@click.pass_obj
def install(
    config: LoaderKitConfig,
    loader: str,
    base_version: str,
    loader_version: Optional[str],
    game_dir: str,
):
    """安装加载器（未指定版本时使用推荐版本）"""

    async def action(manager: LoaderManager):
        version = loader_version
        if not version and loader != LoaderVariant.VANILLA.value:
            version = await manager.recommended_version(loader, base_version)
            if not version:
                raise VersionIncompatibleError(
                    f"没有与 Minecraft {base_version} 兼容的 {loader} 版本",
                    context={"loader": loader, "base_version": base_version},
                )
            logger.info(f"使用推荐版本: {version}")
        return await manager.install(
            loader, base_version, version or "", game_dir, _echo_progress
        )

    version_id = _run(_with_manager(config, action))
    click.echo(f"已安装: {version_id}")


@main.command()
@click.argument("loader", type=LOADER_CHOICE)
@click.argument("base_version")
@click.argument("loader_version")
@click.option("--game-dir", required=True, type=click.Path(file_okay=False), help="实例游戏目录")
@click.pass_obj
def status(
    config: LoaderKitConfig,
    loader: str,
    base_version: str,
    loader_version: str,
    game_dir: str,
):
    """检查加载器是否已安装"""
    installed = _run(
        _with_manager(
            config,
            lambda m: m.is_installed(loader, base_version, loader_version, game_dir),
        )
    )
    click.echo("已安装" if installed else "未安装")
    if not installed:
        raise SystemExit(1)


@main.command("version-id")
@click.argument("loader", type=LOADER_CHOICE)
@click.argument("base_version")
@click.argument("loader_version", required=False)
@click.pass_obj
def version_id(
    config: LoaderKitConfig, loader: str, base_version: str, loader_version: Optional[str]
):
    """计算版本 ID"""

    async def action(manager: LoaderManager):
        return manager.version_id(loader, base_version, loader_version)

    click.echo(_run(_with_manager(config, action)))


@main.command()
@click.argument("loader", type=LOADER_CHOICE)
@click.argument("base_version")
@click.argument("loader_version")
@click.option("--game-dir", required=True, type=click.Path(file_okay=False), help="实例游戏目录")
@click.pass_obj
def uninstall(
    config: LoaderKitConfig,
    loader: str,
    base_version: str,
    loader_version: str,
    game_dir: str,
):
    """卸载加载器版本"""
    removed = _run(
        _with_manager(
            config,
            lambda m: m.uninstall(loader, base_version, loader_version, game_dir),
        )
    )
    click.echo("已卸载" if removed else "未找到已安装的版本")


if __name__ == "__main__":
    main()
